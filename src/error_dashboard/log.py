"""JSON logging for the error dashboard client.

The client runs inside someone else's application, so ``setup_logging``
only configures the ``error_dashboard`` logger tree and leaves the host's
root logger alone.  Report logs carry identity fields, so credential-like
``extra`` keys are masked before they are written.
"""

import json
import logging
import sys
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import TextIO

PACKAGE_LOGGER = "error_dashboard"
REDACTED = "***"

_CREDENTIAL_MARKERS = ("secret", "password", "token", "authorization", "api_key")

# Standard LogRecord attributes; anything else came from `extra={...}`.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
    | {"message", "asctime", "taskName"}
)


def is_credential_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _CREDENTIAL_MARKERS)


def redact(value: object) -> object:
    """Mask credential-like keys in *value*, descending into mappings."""
    if isinstance(value, Mapping):
        return {
            k: REDACTED if is_credential_key(str(k)) else redact(v)
            for k, v in value.items()
        }
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with report context and secrets masked."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        log_entry.update(redact(extra))  # type: ignore[arg-type]

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = "INFO",
    suppress: Sequence[str] = ("httpx", "httpcore"),
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Send ``error_dashboard`` logs to *stream* (stdout) as JSON.

    Args:
        level: Level for the package logger (e.g. "INFO", "DEBUG").
        suppress: Logger names to set to WARNING so per-request transport
                  logs do not drown out report outcomes.
        stream: Destination stream; defaults to stdout.

    Calling it again replaces the handler instead of adding a second one.
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    for name in suppress:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
