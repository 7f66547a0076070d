"""Transport abstraction and its httpx implementation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

_MAX_BODY_CHARS = 2_000


@dataclass(frozen=True, slots=True)
class TransportRequest:
    """A single POST, built once and reused for every attempt."""

    url: str
    headers: dict[str, str]
    json_body: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status_code: int
    body: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class TransportError(Exception):
    """The request could not be completed (connect, timeout, bad response)."""


class Transport(ABC):
    """Sends one request and returns the response.

    Implementations raise TransportError when no response was received and
    must not retry; retrying belongs to the delivery routine.
    """

    @abstractmethod
    async def send(self, request: TransportRequest) -> TransportResponse:
        """Send *request* once."""

    async def aclose(self) -> None:
        """Release any held connections."""


class HttpxTransport(Transport):
    """Transport backed by a single pooled ``httpx.AsyncClient``."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))
        self._client = client

    async def send(self, request: TransportRequest) -> TransportResponse:
        try:
            resp = await self._client.post(
                request.url,
                headers=request.headers,
                json=request.json_body,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"timeout: {e}") from e
        except httpx.RequestError as e:
            # DNS errors, connection refused, TLS, malformed responses, etc.
            raise TransportError(str(e) or type(e).__name__) from e
        except (httpx.InvalidURL, UnicodeEncodeError) as e:
            # Raised while building the request: bad endpoint, non-ASCII header.
            raise TransportError(f"invalid request: {e}") from e

        return TransportResponse(
            status_code=resp.status_code,
            body=_cap_text(resp.text, max_chars=_MAX_BODY_CHARS),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _cap_text(s: str, *, max_chars: int) -> str:
    if len(s) <= max_chars:
        return s
    return s[:max_chars] + f"...(truncated, {len(s)} chars)"
