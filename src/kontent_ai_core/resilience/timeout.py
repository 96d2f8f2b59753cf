import asyncio

import httpx

from ..core.exceptions import AttemptTimeoutError
from ..middleware.base import DelegatingTransport
from .base import ResilienceStrategy


class TimeoutTransport(DelegatingTransport):
    """
    Per-attempt deadline.

    The timeout is also forwarded to the HTTP transport through the
    request's ``timeout`` extension, so network stalls surface as
    httpx.TimeoutException inside the circuit breaker.
    """

    def __init__(self, inner: httpx.AsyncBaseTransport, timeout: float):
        super().__init__(inner)
        self.timeout = timeout

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        request.extensions["timeout"] = httpx.Timeout(self.timeout).as_dict()
        try:
            return await asyncio.wait_for(
                self.inner.handle_async_request(request), self.timeout
            )
        except asyncio.TimeoutError as e:
            raise AttemptTimeoutError(str(request.url), self.timeout) from e


class TimeoutStrategy(ResilienceStrategy):
    name = "timeout"

    def __init__(self, timeout: float):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout

    def wrap(self, inner: httpx.AsyncBaseTransport) -> httpx.AsyncBaseTransport:
        return TimeoutTransport(inner, self.timeout)
