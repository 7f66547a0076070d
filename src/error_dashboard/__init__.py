from error_dashboard.client import ErrorDashboardClient, ReportStatus, static_send_error
from error_dashboard.config import (
    DEFAULT_ENDPOINT,
    ClientSettings,
    ConfigKey,
    Configuration,
    ConfigurationError,
    PartialConfigs,
)
from error_dashboard.delivery import (
    DeliveryOutcome,
    DeliveryRequest,
    DeliveryStatus,
    build_headers,
    deliver,
)
from error_dashboard.payload import ErrorPayload
from error_dashboard.tracker import ErrorTracker
from error_dashboard.transport import (
    HttpxTransport,
    Transport,
    TransportError,
    TransportRequest,
    TransportResponse,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "ClientSettings",
    "ConfigKey",
    "Configuration",
    "ConfigurationError",
    "PartialConfigs",
    "ErrorTracker",
    "ErrorPayload",
    "Transport",
    "HttpxTransport",
    "TransportError",
    "TransportRequest",
    "TransportResponse",
    "DeliveryOutcome",
    "DeliveryRequest",
    "DeliveryStatus",
    "build_headers",
    "deliver",
    "ErrorDashboardClient",
    "ReportStatus",
    "static_send_error",
]
