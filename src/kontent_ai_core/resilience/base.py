"""
Resilience strategy base class and outcome classification.

A strategy wraps a transport with one policy (retry, timeout, circuit
breaker). The composer stacks strategies in order, first = outermost.
"""

from abc import ABC, abstractmethod

import httpx

from ..core.exceptions import AttemptTimeoutError, CircuitOpenError


def is_transient_status(status_code: int) -> bool:
    """5xx, 408 Request Timeout and 429 Too Many Requests."""
    return status_code >= 500 or status_code in (408, 429)


def is_transient_error(error: BaseException) -> bool:
    """
    Network failures and attempt timeouts.

    Client-side protocol errors, an open circuit and cancellation are
    never transient.
    """
    if isinstance(error, CircuitOpenError):
        return False
    if isinstance(error, (httpx.UnsupportedProtocol, httpx.LocalProtocolError)):
        return False
    return isinstance(error, (httpx.TransportError, AttemptTimeoutError))


class ResilienceStrategy(ABC):
    """
    One resilience policy.

    Attributes:
        name: Identifier used by ResiliencePipelineBuilder.replace()
    """

    name: str = "strategy"

    @abstractmethod
    def wrap(self, inner: httpx.AsyncBaseTransport) -> httpx.AsyncBaseTransport:
        """Return a transport applying this policy around ``inner``."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
