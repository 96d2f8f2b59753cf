"""
ActionInvoker - verb-shaped facade over the configured httpx client.

Each call builds the request (relative endpoint, per-call headers, JSON
body), sends it through the middleware + resilience chain and converts
the response:

- ``response_type=None``: the status must be 2xx (UnsuccessfulStatusError
  otherwise), nothing is returned
- ``response_type=T``: the body is deserialized into T with the JSON
  convention; an empty body gives None (or an empty list/dict)

Transport errors, timeouts and open circuits pass through untouched.
Cancellation is plain asyncio task cancellation.
"""

import logging
from typing import Any, BinaryIO, Dict, Optional, Union

import httpx

from .headers import RETRY_ATTEMPTS_EXTENSION
from .identity import TrackingHeaders
from .exceptions import UnsuccessfulStatusError, excerpt
from .serialization import JsonConvention

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

FileContent = Union[bytes, BinaryIO]


class ActionInvoker:
    """
    Typed request facade.

    Args:
        http_client: httpx.AsyncClient built by the factory layer
        json_convention: JSON settings (JsonConvention() if None)
        tracking: Tracking headers set on every request. Only needed when
            http_client was not built with the tracking middleware

    Example:
        >>> invoker = ActionInvoker(build_http_client(options))
        >>> item = await invoker.get("/items/about_us", ContentItem)
        >>> await invoker.post("/items", NewItem(name="About us"))
        >>> created = await invoker.post("/items", NewItem(name="FAQ"), ContentItem)
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        json_convention: Optional[JsonConvention] = None,
        tracking: Optional[TrackingHeaders] = None
    ):
        if http_client is None:
            raise ValueError("http_client is required")
        self.http_client = http_client
        self.json = json_convention or JsonConvention()
        self.tracking = tracking

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # VERBS
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def get(
        self,
        endpoint: str,
        response_type: Any = None,
        *,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        response = await self.send("GET", endpoint, headers=headers)
        return self._convert(response, response_type)

    async def post(
        self,
        endpoint: str,
        payload: Any = None,
        response_type: Any = None,
        *,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        response = await self.send("POST", endpoint, payload=payload, headers=headers)
        return self._convert(response, response_type)

    async def put(
        self,
        endpoint: str,
        payload: Any = None,
        response_type: Any = None,
        *,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        response = await self.send("PUT", endpoint, payload=payload, headers=headers)
        return self._convert(response, response_type)

    async def patch(
        self,
        endpoint: str,
        payload: Any = None,
        response_type: Any = None,
        *,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        response = await self.send("PATCH", endpoint, payload=payload, headers=headers)
        return self._convert(response, response_type)

    async def delete(
        self,
        endpoint: str,
        response_type: Any = None,
        *,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        response = await self.send("DELETE", endpoint, headers=headers)
        return self._convert(response, response_type)

    async def upload_file(
        self,
        endpoint: str,
        file: FileContent,
        file_name: str,
        content_type: str,
        response_type: Any = None,
        *,
        headers: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Multipart upload, the file goes in the ``file`` field.

        Example:
            >>> with open("logo.png", "rb") as f:
            ...     reference = await invoker.upload_file(
            ...         "/files/logo.png", f, "logo.png", "image/png", FileReference
            ...     )
        """
        request = self.http_client.build_request(
            "POST",
            endpoint,
            headers=headers,
            files={"file": (file_name, file, content_type)},
        )
        self._add_tracking_headers(request)
        response = await self.http_client.send(request)
        return self._convert(response, response_type)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # RAW
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    async def send(
        self,
        method: str,
        endpoint: str,
        *,
        payload: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """Send through the pipeline and return the raw response."""
        content = None
        request_headers: Dict[str, str] = dict(headers or {})

        if payload is not None:
            content = self.json.dumps(payload)
            request_headers.setdefault("Content-Type", JSON_CONTENT_TYPE)

        request = self.http_client.build_request(
            method, endpoint, headers=request_headers, content=content
        )
        self._add_tracking_headers(request)
        return await self.http_client.send(request)

    def _add_tracking_headers(self, request: httpx.Request) -> None:
        if self.tracking is not None:
            self.tracking.apply(request.headers)

    def _convert(self, response: httpx.Response, response_type: Any) -> Any:
        if response_type is None:
            self._ensure_success(response)
            return None

        if not response.is_success:
            logger.warning(
                "HTTP %d from %s %s, deserializing error body",
                response.status_code, response.request.method, response.request.url
            )
        return self.json.loads(response.content, response_type)

    @staticmethod
    def _ensure_success(response: httpx.Response) -> None:
        if response.is_success:
            return
        raise UnsuccessfulStatusError(
            response.status_code,
            str(response.request.url),
            body=excerpt(response.text),
            attempts=response.extensions.get(RETRY_ATTEMPTS_EXTENSION),
        )
