"""
Options model for Kontent.ai clients.

All options are immutable (frozen dataclasses) and validated on construction,
so an invalid value never reaches the request pipeline.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol, Sequence, TYPE_CHECKING, Union, runtime_checkable

import httpx

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .identity import SdkIdentity
    from .logging import LoggingConfig
    from .serialization import JsonConvention
    from ..listeners.base import ApiUsageListener


DEFAULT_HTTP_CLIENT_NAME = "kontent-ai-client"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CAPABILITIES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@runtime_checkable
class HasBaseUrl(Protocol):
    """Anything that exposes a base URL."""

    base_url: str


@runtime_checkable
class HasApiKey(Protocol):
    """Anything that exposes an optional bearer API key."""

    api_key: Optional[str]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ENUMS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class BackoffShape(str, Enum):
    """Delay growth between retry attempts."""
    CONSTANT = "constant"
    EXPONENTIAL = "exponential"


class TelemetryExceptionBehavior(str, Enum):
    """What to do when an ApiUsageListener raises."""
    LOG_AND_CONTINUE = "log_and_continue"
    THROW_EXCEPTION = "throw_exception"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESILIENCE OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RetryOptions:
    """
    Retry strategy options.

    Args:
        max_retry_attempts: Retries after the first attempt (0 disables retrying)
        base_delay: Delay before the first retry (seconds)
        max_delay: Upper bound for a single delay (seconds)
        use_jitter: Add random jitter to every delay
        backoff: CONSTANT or EXPONENTIAL growth

    Examples:
        >>> RetryOptions(max_retry_attempts=5, base_delay=0.5)
        >>> RetryOptions(backoff=BackoffShape.CONSTANT, use_jitter=False)
    """
    max_retry_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    use_jitter: bool = True
    backoff: BackoffShape = BackoffShape.EXPONENTIAL

    def __post_init__(self):
        """Reject invalid values with ConfigurationError."""
        if self.max_retry_attempts < 0:
            raise ConfigurationError(
                "max_retry_attempts", self.max_retry_attempts,
                "max_retry_attempts must be non-negative"
            )
        if self.base_delay < 0:
            raise ConfigurationError(
                "base_delay", self.base_delay, "base_delay must be non-negative"
            )
        if self.max_delay < self.base_delay:
            raise ConfigurationError(
                "max_delay", self.max_delay, "max_delay must be >= base_delay"
            )
        if not isinstance(self.backoff, BackoffShape):
            object.__setattr__(self, "backoff", BackoffShape(self.backoff))


@dataclass(frozen=True)
class CircuitBreakerOptions:
    """
    Circuit breaker options.

    Args:
        failure_ratio: Failure share in the sampling window that opens the circuit
        sampling_duration: Length of the sampling window (seconds)
        minimum_throughput: Samples required before the ratio is evaluated
        break_duration: How long the circuit stays open (seconds)
    """
    failure_ratio: float = 0.5
    sampling_duration: float = 30.0
    minimum_throughput: int = 10
    break_duration: float = 30.0

    def __post_init__(self):
        if not 0.0 <= self.failure_ratio <= 1.0:
            raise ConfigurationError(
                "failure_ratio", self.failure_ratio,
                "failure_ratio must be between 0 and 1"
            )
        if self.sampling_duration <= 0:
            raise ConfigurationError(
                "sampling_duration", self.sampling_duration,
                "sampling_duration must be positive"
            )
        if self.minimum_throughput < 1:
            raise ConfigurationError(
                "minimum_throughput", self.minimum_throughput,
                "minimum_throughput must be at least 1"
            )
        if self.break_duration <= 0:
            raise ConfigurationError(
                "break_duration", self.break_duration,
                "break_duration must be positive"
            )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CLIENT OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ClientOptions:
    """
    Per-client configuration shared by every Kontent.ai SDK.

    SDKs subclass it to add their own fields and extend validate()
    (for example a management client that requires an API key).

    Args:
        environment_id: Kontent.ai environment identifier (required)
        base_url: Absolute base address of the API (required)
        api_key: Bearer token; None or blank sends no Authorization header
        http_client_name: Key of the transport in multi-client setups
        resilience_enabled: Master switch for retry/timeout/circuit breaker
        retry: Retry strategy options
        circuit_breaker: Circuit breaker options
        request_timeout: Per-attempt timeout (seconds)

    Examples:
        >>> ClientOptions(environment_id="975bf280", base_url="https://deliver.kontent.ai")
        >>> ClientOptions.create(
        ...     environment_id="975bf280",
        ...     base_url="https://manage.kontent.ai/v2",
        ...     api_key="secret",
        ...     max_retry_attempts=5,
        ... )
    """
    environment_id: str
    base_url: str
    api_key: Optional[str] = None
    http_client_name: str = DEFAULT_HTTP_CLIENT_NAME
    resilience_enabled: bool = True
    retry: RetryOptions = field(default_factory=RetryOptions)
    circuit_breaker: CircuitBreakerOptions = field(default_factory=CircuitBreakerOptions)
    request_timeout: float = 30.0

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check option values.

        Raises:
            ConfigurationError: first invalid field found
        """
        if not self.environment_id or not str(self.environment_id).strip():
            raise ConfigurationError(
                "environment_id", self.environment_id, "EnvironmentId is required"
            )

        if not self.base_url or not str(self.base_url).strip():
            raise ConfigurationError("base_url", self.base_url, "BaseUrl is required")
        try:
            url = httpx.URL(self.base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(
                "base_url", self.base_url, f"BaseUrl is not a valid URL: {e}"
            ) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(
                "base_url", self.base_url, "BaseUrl must be an absolute http(s) URL"
            )

        if not self.http_client_name or not self.http_client_name.strip():
            raise ConfigurationError(
                "http_client_name", self.http_client_name, "HttpClientName is required"
            )

        if self.request_timeout <= 0:
            raise ConfigurationError(
                "request_timeout", self.request_timeout,
                "request_timeout must be positive"
            )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def with_api_key(self, api_key: Optional[str]) -> "ClientOptions":
        """Validated copy with a different API key."""
        return dataclasses.replace(self, api_key=api_key)

    def with_name(self, http_client_name: str) -> "ClientOptions":
        """Validated copy with a different transport name."""
        return dataclasses.replace(self, http_client_name=http_client_name)

    @classmethod
    def create(
        cls,
        environment_id: str,
        base_url: str,
        api_key: Optional[str] = None,
        http_client_name: str = DEFAULT_HTTP_CLIENT_NAME,
        resilience_enabled: bool = True,
        request_timeout: float = 30.0,
        max_retry_attempts: int = 3,
        retry_base_delay: float = 1.0,
        retry_max_delay: float = 30.0,
        use_jitter: bool = True,
        backoff: str = "exponential",
        failure_ratio: float = 0.5,
        sampling_duration: float = 30.0,
        minimum_throughput: int = 10,
        break_duration: float = 30.0,
        **extra: Any
    ) -> "ClientOptions":
        """
        Create options from flat values.

        Extra keyword arguments are passed to the constructor, which lets
        SDK subclasses reuse this method for their own fields.

        Example:
            >>> options = ClientOptions.create(
            ...     environment_id="975bf280",
            ...     base_url="https://deliver.kontent.ai",
            ...     max_retry_attempts=0,
            ... )
        """
        return cls(
            environment_id=environment_id,
            base_url=base_url,
            api_key=api_key,
            http_client_name=http_client_name,
            resilience_enabled=resilience_enabled,
            request_timeout=request_timeout,
            retry=RetryOptions(
                max_retry_attempts=max_retry_attempts,
                base_delay=retry_base_delay,
                max_delay=retry_max_delay,
                use_jitter=use_jitter,
                backoff=BackoffShape(backoff.lower()),
            ),
            circuit_breaker=CircuitBreakerOptions(
                failure_ratio=failure_ratio,
                sampling_duration=sampling_duration,
                minimum_throughput=minimum_throughput,
                break_duration=break_duration,
            ),
            **extra
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CORE SERVICES OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class CoreServicesOptions:
    """
    Services shared by every client an SDK builds.

    Args:
        json_convention: JSON settings for the invoker (default convention if None)
        api_usage_listener: Telemetry listener, or a sequence of listeners
            combined into a CompositeApiUsageListener (no-op listener if None)
        sdk_identity: Identity of the calling SDK (core identity if None)
        telemetry_exception_behavior: Policy for listener failures
        logging: Structured logging setup applied when a client is built
        repository_host: Package registry reported in X-KC-SDKID
    """
    json_convention: Optional["JsonConvention"] = None
    api_usage_listener: Union["ApiUsageListener", Sequence["ApiUsageListener"], None] = None
    sdk_identity: Optional["SdkIdentity"] = None
    telemetry_exception_behavior: TelemetryExceptionBehavior = TelemetryExceptionBehavior.LOG_AND_CONTINUE
    logging: Optional["LoggingConfig"] = None
    repository_host: str = "pypi.org"

    def __post_init__(self):
        if not isinstance(self.telemetry_exception_behavior, TelemetryExceptionBehavior):
            object.__setattr__(
                self,
                "telemetry_exception_behavior",
                TelemetryExceptionBehavior(self.telemetry_exception_behavior),
            )
        if isinstance(self.api_usage_listener, (list, tuple)):
            from ..listeners.composite import CompositeApiUsageListener
            object.__setattr__(
                self, "api_usage_listener", CompositeApiUsageListener(self.api_usage_listener)
            )
        if not self.repository_host or not self.repository_host.strip():
            raise ConfigurationError(
                "repository_host", self.repository_host, "repository_host is required"
            )
