"""
Exception hierarchy for the Kontent.ai core pipeline.

Classification:
- retryable=True  - the resilience pipeline may try the request again
- fatal=True      - never retried, surfaced to the caller as-is

httpx transport exceptions (httpx.ConnectError, httpx.ReadTimeout, ...)
are not wrapped: they propagate unchanged unless retries are exhausted.
"""

from typing import Any, Optional


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class KontentCoreError(Exception):
    """Base exception of the core library."""

    retryable: bool = False
    fatal: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONFIGURATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ConfigurationError(KontentCoreError, ValueError):
    """
    Invalid options value.

    Raised at construction time, before any request is issued.

    Args:
        field: Name of the offending option
        value: Value that was received
        reason: Human readable explanation
    """

    fatal = True

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(reason)


class ClientNotRegisteredError(KontentCoreError, KeyError):
    """No client was registered under the requested name."""

    fatal = True

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No client registered with name '{name}'")

    def __str__(self) -> str:
        return self.message


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESILIENCE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class AttemptTimeoutError(KontentCoreError):
    """A single attempt exceeded the per-attempt timeout."""

    retryable = True

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Attempt timed out after {timeout}s (url: {url})")


class CircuitOpenError(KontentCoreError):
    """
    Circuit breaker is open, the request was not sent.

    Args:
        url: Request URL
        retry_after: Seconds until the breaker admits a probe request
    """

    def __init__(self, url: str, retry_after: float):
        self.url = url
        self.retry_after = retry_after
        super().__init__(
            f"Circuit breaker is open for {url}, retry in {retry_after:.1f}s"
        )


class TooManyRetriesError(KontentCoreError):
    """
    All retry attempts ended with an exception.

    Args:
        attempts: Total number of attempts made
        last_error: Exception raised by the final attempt
        url: Request URL
    """

    def __init__(self, attempts: int, last_error: BaseException, url: str):
        self.attempts = attempts
        self.last_error = last_error
        self.url = url
        super().__init__(
            f"Request to {url} failed after {attempts} attempts: {last_error}"
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# INVOKER
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class UnsuccessfulStatusError(KontentCoreError):
    """
    Non-2xx response where the caller asked for a successful one.

    Args:
        status_code: HTTP status code
        url: Request URL
        body: Response body excerpt
        attempts: Number of attempts the resilience pipeline made
    """

    fatal = True

    def __init__(
        self,
        status_code: int,
        url: str,
        body: str = "",
        attempts: Optional[int] = None
    ):
        self.status_code = status_code
        self.url = url
        self.body = body
        self.attempts = attempts

        msg = f"HTTP {status_code} error for {url}"
        if attempts and attempts > 1:
            msg += f" after {attempts} attempts"
        if body:
            msg += f": {body}"
        super().__init__(msg)


class DeserializationError(KontentCoreError):
    """Response body could not be turned into the requested type."""

    fatal = True

    def __init__(self, target: Any, body: str, cause: Optional[BaseException] = None):
        self.target = target
        self.body = body
        self.cause = cause
        name = getattr(target, "__name__", repr(target))
        msg = f"Failed to deserialize response into {name}"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TELEMETRY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TelemetryListenerError(KontentCoreError):
    """Usage listener failed and the configured behavior is to throw."""

    def __init__(self, hook: str):
        self.hook = hook
        super().__init__(
            f"Telemetry listener failed in {hook}. "
            "Set telemetry_exception_behavior to LOG_AND_CONTINUE to ignore listener errors."
        )


def excerpt(text: str, limit: int = 500) -> str:
    """Shorten a response body for error messages."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
