"""Core options, identity, headers and serialization."""

from .exceptions import (
    KontentCoreError,
    ConfigurationError,
    ClientNotRegisteredError,
    AttemptTimeoutError,
    CircuitOpenError,
    TooManyRetriesError,
    UnsuccessfulStatusError,
    DeserializationError,
    TelemetryListenerError,
)
from .options import (
    BackoffShape,
    CircuitBreakerOptions,
    ClientOptions,
    CoreServicesOptions,
    DEFAULT_HTTP_CLIENT_NAME,
    HasApiKey,
    HasBaseUrl,
    RetryOptions,
    TelemetryExceptionBehavior,
)
from .identity import (
    SdkIdentity,
    SourceTracking,
    TrackingHeaders,
    compute_sdk_tracking_header,
    compute_source_tracking_header,
)
from .headers import get_continuation_token, parse_retry_after
from .serialization import JsonConvention
from .models import ApiModel
from .options_monitor import OptionsMonitor

__all__ = [
    "KontentCoreError",
    "ConfigurationError",
    "ClientNotRegisteredError",
    "AttemptTimeoutError",
    "CircuitOpenError",
    "TooManyRetriesError",
    "UnsuccessfulStatusError",
    "DeserializationError",
    "TelemetryListenerError",
    "BackoffShape",
    "CircuitBreakerOptions",
    "ClientOptions",
    "CoreServicesOptions",
    "DEFAULT_HTTP_CLIENT_NAME",
    "HasApiKey",
    "HasBaseUrl",
    "RetryOptions",
    "TelemetryExceptionBehavior",
    "SdkIdentity",
    "SourceTracking",
    "TrackingHeaders",
    "compute_sdk_tracking_header",
    "compute_source_tracking_header",
    "get_continuation_token",
    "parse_retry_after",
    "JsonConvention",
    "ApiModel",
    "OptionsMonitor",
]
