"""Request pipeline middleware (httpx transport wrappers)."""

from .base import DelegatingTransport
from .authentication import AuthenticationTransport
from .tracking import TrackingTransport, SDK_TRACKING_HEADER, SOURCE_TRACKING_HEADER
from .telemetry import TelemetryTransport

__all__ = [
    "DelegatingTransport",
    "AuthenticationTransport",
    "TrackingTransport",
    "TelemetryTransport",
    "SDK_TRACKING_HEADER",
    "SOURCE_TRACKING_HEADER",
]
