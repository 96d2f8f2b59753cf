from typing import Callable, Optional

import httpx

from ..core.options import HasApiKey
from .base import DelegatingTransport

AUTHORIZATION_HEADER = "Authorization"


class AuthenticationTransport(DelegatingTransport):
    """
    Adds ``Authorization: Bearer {api_key}`` to every attempt.

    The options are read through ``options_provider`` on each request, so
    a reloaded API key takes effect without rebuilding the transport.
    Blank or missing keys leave the request untouched.

    Args:
        inner: Next transport in the chain
        options_provider: Returns the current options (anything with ``api_key``)
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        options_provider: Callable[[], Optional[HasApiKey]]
    ):
        super().__init__(inner)
        self._options_provider = options_provider

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        options = self._options_provider()
        api_key = getattr(options, "api_key", None)

        if api_key and api_key.strip():
            request.headers[AUTHORIZATION_HEADER] = f"Bearer {api_key}"

        return await self.inner.handle_async_request(request)
