"""Test fixtures for error_dashboard tests."""

import asyncio
from collections.abc import Iterable

import pytest

from error_dashboard.client import ErrorDashboardClient
from error_dashboard.config import Configuration
from error_dashboard.tracker import ErrorTracker
from error_dashboard.transport import (
    Transport,
    TransportError,
    TransportRequest,
    TransportResponse,
)


class FakeClock:
    """Manually advanced wall clock (seconds)."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport(Transport):
    """Replays scripted results; the last one repeats once the script runs out.

    Each scripted item is a status code or a TransportError instance.
    """

    def __init__(self, script: Iterable[int | TransportError] = (200,)) -> None:
        self._script = list(script)
        self.requests: list[TransportRequest] = []
        self.closed = False

    async def send(self, request: TransportRequest) -> TransportResponse:
        self.requests.append(request)
        index = min(len(self.requests), len(self._script)) - 1
        item = self._script[index]
        if isinstance(item, TransportError):
            raise item
        return TransportResponse(status_code=item)

    async def aclose(self) -> None:
        self.closed = True


class GatedTransport(Transport):
    """Holds every send open until ``gate`` is set, then answers 200."""

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.requests: list[TransportRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, request: TransportRequest) -> TransportResponse:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self.gate.wait()
        finally:
            self.in_flight -= 1
        return TransportResponse(status_code=200)

    async def wait_for_requests(self, count: int) -> None:
        while len(self.requests) < count:
            await asyncio.sleep(0)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def configuration() -> Configuration:
    """Fast retries so failure paths do not slow the suite down."""
    return Configuration(max_age=5_000, retry_delay=1, retry_attempts=3)


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture()
def tracker(clock: FakeClock, configuration: Configuration) -> ErrorTracker:
    return ErrorTracker(configuration.max_age_seconds, clock=clock)


@pytest.fixture()
def client(
    transport: FakeTransport,
    configuration: Configuration,
    tracker: ErrorTracker,
) -> ErrorDashboardClient:
    return ErrorDashboardClient(
        "client-1",
        "secret-1",
        endpoint="https://dashboard.test/sdk/error",
        transport=transport,
        configuration=configuration,
        tracker=tracker,
    )
