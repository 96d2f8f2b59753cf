"""Kontent.ai core - shared HTTP pipeline for Kontent.ai Python SDKs."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.exceptions import (
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
from .core.options import (
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
from .core.identity import SdkIdentity, SourceTracking, TrackingHeaders
from .core.headers import get_continuation_token, parse_retry_after
from .core.serialization import JsonConvention
from .core.models import ApiModel
from .core.options_monitor import OptionsMonitor
from .core.invoker import ActionInvoker
from .core.pipeline import build_http_client, build_transport
from .core.factory import (
    ClientFactoryBuilder,
    MultipleClientFactory,
    create_client,
)
from .core.env_config import (
    OptionsFileWatcher,
    load_options_file,
    load_options_from_env,
)
from .core.logging import LoggingConfig, configure_logging
from .listeners import (
    ApiUsageListener,
    CompositeApiUsageListener,
    LoggingApiUsageListener,
    NoOpApiUsageListener,
)
from .resilience import (
    CircuitBreaker,
    CircuitState,
    ResiliencePipelineBuilder,
    ResilienceStrategy,
)

# Users configure logging themselves via logging.getLogger('kontent_ai_core')
# or LoggingConfig.
logging.getLogger('kontent_ai_core').addHandler(logging.NullHandler())

try:
    __version__ = version("kontent-ai-core")
except PackageNotFoundError:
    # Not installed (development checkout)
    __version__ = "0.0.0-dev"

__all__ = [
    # Options
    "ClientOptions",
    "CoreServicesOptions",
    "RetryOptions",
    "CircuitBreakerOptions",
    "BackoffShape",
    "TelemetryExceptionBehavior",
    "DEFAULT_HTTP_CLIENT_NAME",
    "HasApiKey",
    "HasBaseUrl",
    "OptionsMonitor",

    # Identity
    "SdkIdentity",
    "SourceTracking",
    "TrackingHeaders",

    # Headers / JSON
    "get_continuation_token",
    "parse_retry_after",
    "JsonConvention",
    "ApiModel",

    # Pipeline
    "ActionInvoker",
    "build_http_client",
    "build_transport",
    "create_client",
    "ClientFactoryBuilder",
    "MultipleClientFactory",

    # Resilience
    "ResiliencePipelineBuilder",
    "ResilienceStrategy",
    "CircuitBreaker",
    "CircuitState",

    # Telemetry
    "ApiUsageListener",
    "CompositeApiUsageListener",
    "LoggingApiUsageListener",
    "NoOpApiUsageListener",

    # Configuration sources
    "load_options_from_env",
    "load_options_file",
    "OptionsFileWatcher",

    # Logging
    "LoggingConfig",
    "configure_logging",

    # Exceptions
    "KontentCoreError",
    "ConfigurationError",
    "ClientNotRegisteredError",
    "AttemptTimeoutError",
    "CircuitOpenError",
    "TooManyRetriesError",
    "UnsuccessfulStatusError",
    "DeserializationError",
    "TelemetryListenerError",

    "__version__",
]
