import httpx

from ..core.headers import SDK_TRACKING_HEADER, SOURCE_TRACKING_HEADER
from ..core.identity import TrackingHeaders
from .base import DelegatingTransport

__all__ = ["TrackingTransport", "SDK_TRACKING_HEADER", "SOURCE_TRACKING_HEADER"]


class TrackingTransport(DelegatingTransport):
    """
    Sets X-KC-SDKID and, when the source is known, X-KC-SOURCE.

    Values are set (not appended), so a retried request carries each
    header exactly once.
    """

    def __init__(self, inner: httpx.AsyncBaseTransport, tracking: TrackingHeaders):
        super().__init__(inner)
        self.tracking = tracking

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.tracking.apply(request.headers)
        return await self.inner.handle_async_request(request)
