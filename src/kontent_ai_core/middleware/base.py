"""
Base class for middleware transports.

Each middleware wraps an inner httpx.AsyncBaseTransport and is itself a
transport, so the pipeline is an explicit chain of wrappers built once per
client:

    TelemetryTransport(RetryTransport(...(AuthenticationTransport(AsyncHTTPTransport()))))
"""

import httpx


class DelegatingTransport(httpx.AsyncBaseTransport):
    """
    Transport that forwards to an inner transport.

    Subclasses override handle_async_request() and call
    ``await self.inner.handle_async_request(request)`` to continue the chain.
    """

    def __init__(self, inner: httpx.AsyncBaseTransport):
        self.inner = inner

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        return await self.inner.handle_async_request(request)

    async def aclose(self) -> None:
        await self.inner.aclose()
