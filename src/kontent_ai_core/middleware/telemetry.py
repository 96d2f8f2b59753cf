import logging
import time
from typing import Optional

import httpx

from ..core.exceptions import TelemetryListenerError
from ..core.options import TelemetryExceptionBehavior
from ..listeners.base import ApiUsageListener, NO_OP_LISTENER
from .base import DelegatingTransport

logger = logging.getLogger(__name__)


class TelemetryTransport(DelegatingTransport):
    """
    Reports every logical request to an ApiUsageListener.

    Outermost middleware: ``elapsed`` covers all retry attempts and
    on_request_end fires exactly once per request, including failures
    and cancellation.

    Listener errors follow ``behavior``:
    - LOG_AND_CONTINUE: logged as a warning, the real outcome is kept
    - THROW_EXCEPTION: TelemetryListenerError is raised
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        listener: Optional[ApiUsageListener] = None,
        behavior: TelemetryExceptionBehavior = TelemetryExceptionBehavior.LOG_AND_CONTINUE,
        log: Optional[logging.Logger] = None
    ):
        super().__init__(inner)
        self.listener = listener or NO_OP_LISTENER
        self.behavior = behavior
        self._logger = log or logger

    def _handle_listener_error(self, error: Exception, hook: str) -> None:
        if self.behavior == TelemetryExceptionBehavior.THROW_EXCEPTION:
            raise TelemetryListenerError(hook) from error
        self._logger.warning("ApiUsageListener.%s failed: %s", hook, error, exc_info=error)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        started = time.perf_counter()
        response: Optional[httpx.Response] = None
        failure: Optional[BaseException] = None

        try:
            try:
                await self.listener.on_request_start(request)
            except Exception as e:
                self._handle_listener_error(e, "on_request_start")

            response = await self.inner.handle_async_request(request)
            return response
        except BaseException as e:
            failure = e
            raise
        finally:
            elapsed = time.perf_counter() - started
            try:
                await self.listener.on_request_end(request, response, failure, elapsed)
            except Exception as e:
                self._handle_listener_error(e, "on_request_end")
