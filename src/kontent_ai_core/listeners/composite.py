"""Several listeners behind one ApiUsageListener."""

import logging
from typing import Iterable, List, Optional

import httpx

from .base import ApiUsageListener

logger = logging.getLogger(__name__)


class CompositeApiUsageListener(ApiUsageListener):
    """
    Calls each listener in registration order.

    A failing listener does not stop the others; once all have run, the
    first failure is re-raised so TelemetryTransport applies its policy.

    Example:
        >>> listener = CompositeApiUsageListener([
        ...     OpenTelemetryUsageListener(),
        ...     OpenTelemetryMetricsListener(),
        ... ])
    """

    def __init__(self, listeners: Iterable[ApiUsageListener]):
        self.listeners: List[ApiUsageListener] = []
        for listener in listeners:
            if isinstance(listener, CompositeApiUsageListener):
                self.listeners.extend(listener.listeners)
            else:
                self.listeners.append(listener)

    @staticmethod
    def _raise_first(errors: List[Exception], hook: str) -> None:
        if not errors:
            return
        for extra in errors[1:]:
            logger.warning("ApiUsageListener.%s failed: %s", hook, extra)
        raise errors[0]

    async def on_request_start(self, request: httpx.Request) -> None:
        errors: List[Exception] = []
        for listener in self.listeners:
            try:
                await listener.on_request_start(request)
            except Exception as e:
                errors.append(e)
        self._raise_first(errors, "on_request_start")

    async def on_request_end(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
        elapsed: float
    ) -> None:
        errors: List[Exception] = []
        for listener in self.listeners:
            try:
                await listener.on_request_end(request, response, error, elapsed)
            except Exception as e:
                errors.append(e)
        self._raise_first(errors, "on_request_end")
