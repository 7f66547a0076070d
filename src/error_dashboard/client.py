"""Client facade: deduplicate, deliver and record error reports."""

import asyncio
import logging
import threading
from enum import StrEnum
from types import TracebackType
from typing import Self

from error_dashboard.config import DEFAULT_ENDPOINT, ClientSettings, Configuration
from error_dashboard.delivery import DeliveryRequest, DeliveryStatus, deliver
from error_dashboard.payload import ErrorPayload
from error_dashboard.tracker import ErrorTracker
from error_dashboard.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


class ReportStatus(StrEnum):
    SUPPRESSED = "suppressed"
    SENT = "sent"
    REJECTED = "rejected"
    FAILED = "failed"


class ErrorDashboardClient:
    """Reports application errors to the error dashboard.

    Reporting is best effort: ``send_error`` never raises into the
    caller.  Outcomes are only visible through logging, and only when the
    configuration has ``verbose`` enabled.

    The configuration and the tracker are guarded independently, and
    neither guard is held while the report is on the network, so
    concurrent reports for different messages do not wait on each other.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        transport: Transport | None = None,
        configuration: Configuration | None = None,
        tracker: ErrorTracker | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._endpoint = endpoint

        if configuration is None:
            configuration = Configuration()
        self._configs = configuration.model_copy()
        self._configs_lock = threading.Lock()

        self._owns_transport = transport is None
        if transport is None:
            transport = HttpxTransport(timeout_seconds=timeout_seconds)
        self._transport = transport

        if tracker is None:
            tracker = ErrorTracker(self._configs.max_age_seconds)
        else:
            tracker.max_age_seconds = self._configs.max_age_seconds
        self._tracker = tracker

        self._background: set[asyncio.Task[None]] = set()

    @classmethod
    def initialize(
        cls,
        client_id: str,
        client_secret: str,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        transport: Transport | None = None,
        configuration: Configuration | None = None,
        tracker: ErrorTracker | None = None,
        timeout_seconds: float = 10.0,
    ) -> Self:
        """Create a client meant to be shared across the application."""
        return cls(
            client_id,
            client_secret,
            endpoint=endpoint,
            transport=transport,
            configuration=configuration,
            tracker=tracker,
            timeout_seconds=timeout_seconds,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings | None = None,
        *,
        transport: Transport | None = None,
        configuration: Configuration | None = None,
        tracker: ErrorTracker | None = None,
    ) -> Self:
        """Create a client from ``ERROR_DASHBOARD_*`` environment settings."""
        if settings is None:
            settings = ClientSettings()
        return cls(
            settings.client_id,
            settings.client_secret,
            endpoint=settings.endpoint,
            timeout_seconds=settings.request_timeout_seconds,
            transport=transport,
            configuration=configuration,
            tracker=tracker,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def tracker(self) -> ErrorTracker:
        return self._tracker

    @property
    def configuration(self) -> Configuration:
        """A copy of the current configuration snapshot."""
        with self._configs_lock:
            return self._configs.model_copy()

    def override_configs(self, new_configs: Configuration) -> None:
        """Replace the whole configuration.

        The client keeps its own copy, so later changes to *new_configs*
        do not leak into reports already relying on the snapshot.
        """
        snapshot = new_configs.model_copy()
        with self._configs_lock:
            self._configs = snapshot
            self._tracker.max_age_seconds = snapshot.max_age_seconds

    async def send_error(self, error: object, message: str) -> None:
        """Report *error* under the deduplication key *message*."""
        try:
            await self._send_error(error, message)
        except Exception:
            logger.exception(
                "Unexpected failure while reporting error",
                extra={"error_message": message},
            )

    def report(self, error: object, message: str) -> asyncio.Task[None] | None:
        """Schedule ``send_error`` on the running loop and return at once.

        Returns None when no event loop is running; the report is dropped.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if self.configuration.verbose:
                logger.warning(
                    "No running event loop, error report dropped",
                    extra={"error_message": message},
                )
            return None

        task = loop.create_task(self.send_error(error, message))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def aclose(self) -> None:
        """Wait for scheduled reports, then close the transport if owned."""
        if self._background:
            await asyncio.gather(*self._background)
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _send_error(self, error: object, message: str) -> ReportStatus:
        config = self.configuration
        log_ctx = {"error_message": message, "endpoint": self._endpoint}

        if self._tracker.is_duplicate(message, max_age_seconds=config.max_age_seconds):
            if config.verbose:
                logger.info(
                    "Duplicate error detected, not sending",
                    extra={**log_ctx, "report_status": ReportStatus.SUPPRESSED},
                )
            return ReportStatus.SUPPRESSED

        payload = ErrorPayload.from_error(
            client_id=self._client_id,
            client_secret=self._client_secret,
            error=error,
            message=message,
        )
        request = DeliveryRequest(
            endpoint=self._endpoint,
            client_id=self._client_id,
            client_secret=self._client_secret,
            body=payload,
            retry_attempts=config.retry_attempts,
            retry_delay=config.retry_delay_seconds,
        )

        outcome = await deliver(self._transport, request)
        log_ctx["attempts"] = outcome.attempts

        if outcome.status == DeliveryStatus.SUCCESS:
            self._tracker.record(message, max_age_seconds=config.max_age_seconds)
            if config.verbose:
                logger.info(
                    "Error sent successfully",
                    extra={**log_ctx, "report_status": ReportStatus.SENT},
                )
            return ReportStatus.SENT

        if outcome.status == DeliveryStatus.REMOTE_REJECTED:
            if config.verbose:
                logger.warning(
                    "Error dashboard rejected the report",
                    extra={
                        **log_ctx,
                        "report_status": ReportStatus.REJECTED,
                        "status_code": outcome.status_code,
                    },
                )
            return ReportStatus.REJECTED

        if config.verbose:
            logger.warning(
                "Error while sending the error report",
                extra={
                    **log_ctx,
                    "report_status": ReportStatus.FAILED,
                    "reason": outcome.reason,
                },
            )
        return ReportStatus.FAILED


async def static_send_error(client: ErrorDashboardClient, error: object, message: str) -> None:
    """Report through a shared client handle."""
    await client.send_error(error, message)
