"""
Base class for API usage listeners.

Listeners are awaited by TelemetryTransport once per logical request:
on_request_start before the first attempt, on_request_end after the last
one (including retries), whatever the outcome.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx


class ApiUsageListener(ABC):
    """
    Telemetry hook for API usage.

    Example:
        >>> class CountingListener(ApiUsageListener):
        ...     def __init__(self):
        ...         self.count = 0
        ...
        ...     async def on_request_start(self, request):
        ...         self.count += 1
        ...
        ...     async def on_request_end(self, request, response, error, elapsed):
        ...         pass
    """

    @abstractmethod
    async def on_request_start(self, request: httpx.Request) -> None:
        """
        Called before the request is sent.

        Args:
            request: Outgoing request (headers may still be added by inner middleware)
        """

    @abstractmethod
    async def on_request_end(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
        elapsed: float
    ) -> None:
        """
        Called once the request has finished, successfully or not.

        Args:
            request: The request
            response: Final response, None if the request raised
            error: Exception raised by the pipeline, None on response
            elapsed: Wall time of the whole logical request (seconds)
        """


class NoOpApiUsageListener(ApiUsageListener):
    """Default listener, does nothing."""

    async def on_request_start(self, request: httpx.Request) -> None:
        return None

    async def on_request_end(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
        elapsed: float
    ) -> None:
        return None


NO_OP_LISTENER = NoOpApiUsageListener()
