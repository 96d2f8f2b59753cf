"""Retry, timeout and circuit breaker strategies and their composer."""

from .base import ResilienceStrategy, is_transient_error, is_transient_status
from .retry import RetryStrategy, RetryTransport, WaitRetryAfter, RETRY_ATTEMPTS_EXTENSION
from .timeout import TimeoutStrategy, TimeoutTransport
from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerStrategy,
    CircuitBreakerTransport,
    CircuitState,
)
from .pipeline import (
    ConfigureResilience,
    ResiliencePipeline,
    ResiliencePipelineBuilder,
    compose_resilience,
    default_strategies,
)

__all__ = [
    "ResilienceStrategy",
    "is_transient_error",
    "is_transient_status",
    "RetryStrategy",
    "RetryTransport",
    "WaitRetryAfter",
    "RETRY_ATTEMPTS_EXTENSION",
    "TimeoutStrategy",
    "TimeoutTransport",
    "CircuitBreaker",
    "CircuitBreakerStrategy",
    "CircuitBreakerTransport",
    "CircuitState",
    "ConfigureResilience",
    "ResiliencePipeline",
    "ResiliencePipelineBuilder",
    "compose_resilience",
    "default_strategies",
]
