"""Retrying delivery of error payloads to the collection endpoint."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum

from error_dashboard.payload import ErrorPayload
from error_dashboard.transport import (
    Transport,
    TransportError,
    TransportRequest,
)

logger = logging.getLogger(__name__)

CONTENT_TYPE_JSON = "application/json"


class DeliveryStatus(StrEnum):
    SUCCESS = "success"
    REMOTE_REJECTED = "remote_rejected"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True, slots=True)
class DeliveryOutcome:
    """Outcome of a delivery, taken from the last attempt made."""

    status: DeliveryStatus
    attempts: int
    status_code: int | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == DeliveryStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class DeliveryRequest:
    """Everything needed to deliver one payload.

    ``retry_attempts`` is the total number of sends (at least 1) and
    ``retry_delay`` the pause in seconds between two sends.
    """

    endpoint: str
    client_id: str
    client_secret: str
    body: ErrorPayload | None = None
    headers: Mapping[str, str] | None = None
    retry_attempts: int = 3
    retry_delay: float = 3.0

    def __post_init__(self) -> None:
        if isinstance(self.retry_attempts, bool) or self.retry_attempts < 1:
            raise ValueError("retry_attempts must be a positive number")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must not be negative")


def build_headers(request: DeliveryRequest) -> dict[str, str]:
    """Identity headers, then the content type, then caller overrides.

    Caller headers replace earlier ones with the same name regardless of
    case.
    """
    headers = {
        "client_id": request.client_id,
        "client_secret": request.client_secret,
        "Content-Type": CONTENT_TYPE_JSON,
    }
    for name, value in (request.headers or {}).items():
        for existing in [k for k in headers if k.lower() == name.lower()]:
            del headers[existing]
        headers[name] = value
    return headers


async def deliver(
    transport: Transport,
    request: DeliveryRequest,
    *,
    sleep: Callable[[float], Awaitable[None]] | None = None,
) -> DeliveryOutcome:
    """Send *request* until it succeeds or the attempts run out.

    A 2xx response ends the sequence immediately.  Transport errors and
    non-2xx responses are retried after ``retry_delay``; there is no
    pause after the final attempt.  Returns the outcome of the last
    attempt, so callers can tell a rejection from an unreachable
    endpoint.  Transport errors are never raised.
    """
    if sleep is None:
        sleep = asyncio.sleep
    outgoing = TransportRequest(
        url=request.endpoint,
        headers=build_headers(request),
        json_body=request.body.model_dump(mode="json") if request.body is not None else None,
    )

    attempt = 1
    while True:
        outcome = await _attempt(transport, outgoing, attempt)
        if outcome.ok or attempt >= request.retry_attempts:
            return outcome
        await sleep(request.retry_delay)
        attempt += 1


async def _attempt(
    transport: Transport, outgoing: TransportRequest, attempt: int
) -> DeliveryOutcome:
    log_ctx = {"endpoint": outgoing.url, "attempt": attempt}
    try:
        response = await transport.send(outgoing)
    except TransportError as e:
        logger.debug("Delivery attempt failed", extra={**log_ctx, "reason": str(e)})
        return DeliveryOutcome(
            status=DeliveryStatus.TRANSPORT_FAILURE,
            attempts=attempt,
            reason=str(e),
        )

    if response.is_success:
        return DeliveryOutcome(
            status=DeliveryStatus.SUCCESS,
            attempts=attempt,
            status_code=response.status_code,
        )

    logger.debug(
        "Delivery attempt rejected",
        extra={**log_ctx, "status_code": response.status_code},
    )
    return DeliveryOutcome(
        status=DeliveryStatus.REMOTE_REJECTED,
        attempts=attempt,
        status_code=response.status_code,
        reason=f"HTTP {response.status_code}",
    )
