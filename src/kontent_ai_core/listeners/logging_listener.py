import logging
from typing import Optional

import httpx

from ..core.headers import RETRY_ATTEMPTS_EXTENSION
from ..utils.sanitizer import mask_headers, mask_url
from .base import ApiUsageListener

logger = logging.getLogger(__name__)


class LoggingApiUsageListener(ApiUsageListener):
    """
    Listener that writes API usage to the log.

    Secrets in headers and query strings are masked before logging.

    Args:
        log_headers: Include (masked) request headers at DEBUG level
        slow_request_threshold: Log a warning for requests slower than this (seconds)
    """

    def __init__(
        self,
        log_headers: bool = False,
        slow_request_threshold: Optional[float] = None,
        log: Optional[logging.Logger] = None
    ):
        self.log_headers = log_headers
        self.slow_request_threshold = slow_request_threshold
        self._logger = log or logger

    async def on_request_start(self, request: httpx.Request) -> None:
        url = mask_url(str(request.url))
        self._logger.info("Sending %s request to %s", request.method, url)
        if self.log_headers:
            self._logger.debug("Request headers: %s", mask_headers(dict(request.headers)))

    async def on_request_end(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
        elapsed: float
    ) -> None:
        url = mask_url(str(request.url))
        elapsed_ms = elapsed * 1000

        if error is not None:
            self._logger.error(
                "%s %s failed after %.1fms: %s: %s",
                request.method, url, elapsed_ms, type(error).__name__, error
            )
            return

        if response is None:
            return

        attempts = response.extensions.get(RETRY_ATTEMPTS_EXTENSION, 1)
        self._logger.info(
            "Received %d from %s %s in %.1fms (attempts: %d)",
            response.status_code, request.method, url, elapsed_ms, attempts
        )

        if self.slow_request_threshold is not None and elapsed > self.slow_request_threshold:
            self._logger.warning(
                "Slow request: %s %s took %.1fms", request.method, url, elapsed_ms
            )
