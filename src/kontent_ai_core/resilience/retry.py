"""
Retry strategy on top of tenacity.

- Exponential or constant backoff with optional jitter, capped at max_delay
- Retry-After header (429/503) overrides the computed delay
- Exhausted response retries return the last response,
  exhausted exception retries raise TooManyRetriesError
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx
import tenacity
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_fixed,
    wait_random,
)

from ..core.exceptions import TooManyRetriesError
from ..core.headers import RETRY_ATTEMPTS_EXTENSION, parse_retry_after
from ..core.options import BackoffShape, RetryOptions
from ..middleware.base import DelegatingTransport
from .base import ResilienceStrategy, is_transient_error, is_transient_status

logger = logging.getLogger(__name__)

RETRY_AFTER_STATUSES = (429, 503)

SleepFunc = Callable[[float], Awaitable[Any]]


def _is_transient_response(result: Any) -> bool:
    return isinstance(result, httpx.Response) and is_transient_status(result.status_code)


class WaitRetryAfter(tenacity.wait.wait_base):
    """
    Wait strategy that prefers the Retry-After header over backoff.

    Retry-After is honoured on 429/503 responses; otherwise the fallback
    delay is used, capped at ``max_delay``.
    """

    def __init__(self, fallback: tenacity.wait.wait_base, max_delay: float):
        self.fallback = fallback
        self.max_delay = max_delay

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and not outcome.failed:
            response = outcome.result()
            if isinstance(response, httpx.Response) and response.status_code in RETRY_AFTER_STATUSES:
                retry_after = parse_retry_after(response)
                if retry_after is not None:
                    logger.debug("Using Retry-After header: %.2fs", retry_after)
                    return retry_after

        return min(self.fallback(retry_state), self.max_delay)


def build_wait(options: RetryOptions) -> WaitRetryAfter:
    if options.backoff == BackoffShape.EXPONENTIAL:
        fallback = wait_exponential(multiplier=options.base_delay, max=options.max_delay)
    else:
        fallback = wait_fixed(options.base_delay)

    if options.use_jitter and options.base_delay > 0:
        fallback = fallback + wait_random(0, options.base_delay)

    return WaitRetryAfter(fallback, options.max_delay)


class RetryTransport(DelegatingTransport):
    """
    Re-sends transient failures.

    The request body is buffered before the first attempt so every attempt
    sends a fresh copy. Responses that trigger a retry are read and closed
    before sleeping.
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        options: RetryOptions,
        sleep: Optional[SleepFunc] = None
    ):
        super().__init__(inner)
        self.options = options
        self._wait = build_wait(options)
        self._sleep = sleep or asyncio.sleep

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        if outcome is not None and outcome.failed:
            reason = repr(outcome.exception())
        else:
            reason = f"HTTP {outcome.result().status_code}" if outcome else "unknown"
        logger.info(
            "Retry attempt %d/%d after %.2fs (%s)",
            retry_state.attempt_number, self.options.max_retry_attempts, delay, reason
        )

    def _on_exhausted(self, retry_state: RetryCallState) -> Any:
        outcome = retry_state.outcome
        if not outcome.failed:
            response = outcome.result()
            logger.warning(
                "Giving up after %d attempts, returning HTTP %d",
                retry_state.attempt_number, response.status_code
            )
            return response

        error = outcome.exception()
        if retry_state.attempt_number <= 1:
            raise error

        url = str(retry_state.args[0].url) if retry_state.args else ""
        logger.warning("Giving up after %d attempts: %r", retry_state.attempt_number, error)
        raise TooManyRetriesError(retry_state.attempt_number, error, url) from error

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()

        attempts = 0

        async def send_once(req: httpx.Request) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            response = await self.inner.handle_async_request(req)
            if is_transient_status(response.status_code):
                await response.aread()
                await response.aclose()
            return response

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.options.max_retry_attempts + 1),
            wait=self._wait,
            retry=retry_if_exception(is_transient_error) | retry_if_result(_is_transient_response),
            before_sleep=self._before_sleep,
            retry_error_callback=self._on_exhausted,
            sleep=self._sleep,
        )
        response = await retrying(send_once, request)
        response.extensions[RETRY_ATTEMPTS_EXTENSION] = attempts
        return response


class RetryStrategy(ResilienceStrategy):
    """
    Retry policy built from RetryOptions.

    Args:
        options: Retry options
        sleep: Async sleep function (asyncio.sleep by default; tests pass a fake)
    """

    name = "retry"

    def __init__(self, options: RetryOptions, sleep: Optional[SleepFunc] = None):
        self.options = options
        self.sleep = sleep

    def wrap(self, inner: httpx.AsyncBaseTransport) -> httpx.AsyncBaseTransport:
        return RetryTransport(inner, self.options, sleep=self.sleep)
