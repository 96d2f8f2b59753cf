"""
Circuit Breaker pattern implementation for fault tolerance.

Protects the API (and the caller) from cascading failures by blocking
requests while the failure ratio in a sliding sampling window is too high.
"""

import asyncio
import logging
import time
from collections import deque
from enum import Enum
from typing import Callable, Deque, Optional, Tuple

import httpx

from ..core.exceptions import CircuitOpenError
from ..core.options import CircuitBreakerOptions
from ..middleware.base import DelegatingTransport
from .base import ResilienceStrategy, is_transient_error, is_transient_status

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"      # Normal operation, requests allowed
    OPEN = "open"          # Too many failures, requests blocked
    HALF_OPEN = "half_open"  # Testing recovery, one probe allowed


class CircuitBreaker:
    """
    Sliding-window circuit breaker.

    States:
        - CLOSED: all requests pass, outcomes are sampled
        - OPEN: requests are rejected for break_duration
        - HALF_OPEN: a single probe request is admitted

    Transitions:
        - CLOSED -> OPEN: samples >= minimum_throughput and
          failure ratio >= failure_ratio within sampling_duration
        - OPEN -> HALF_OPEN: after break_duration
        - HALF_OPEN -> CLOSED: probe succeeded
        - HALF_OPEN -> OPEN: probe failed

    Example:
        >>> breaker = CircuitBreaker(CircuitBreakerOptions(minimum_throughput=5))
        >>> if await breaker.allow_request():
        ...     try:
        ...         response = await send()
        ...         await breaker.record_success()
        ...     except httpx.TransportError:
        ...         await breaker.record_failure()
        ...         raise
    """

    def __init__(
        self,
        options: CircuitBreakerOptions,
        clock: Callable[[], float] = time.monotonic
    ):
        self.options = options
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._samples: Deque[Tuple[float, bool]] = deque()
        self._opened_at: Optional[float] = None
        self._probe_in_flight = False
        self._lock = asyncio.Lock()

        logger.debug(
            "CircuitBreaker initialized: ratio=%.2f, throughput=%d, window=%.1fs, break=%.1fs",
            options.failure_ratio,
            options.minimum_throughput,
            options.sampling_duration,
            options.break_duration
        )

    @property
    def state(self) -> CircuitState:
        """Current state (with automatic OPEN -> HALF_OPEN transition)."""
        self._check_state_transition(self._clock())
        return self._state

    @property
    def retry_after(self) -> float:
        """Seconds until an open circuit admits a probe."""
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return 0.0
        elapsed = self._clock() - self._opened_at
        return max(0.0, self.options.break_duration - elapsed)

    def _check_state_transition(self, now: float) -> None:
        if self._state == CircuitState.OPEN and self._opened_at is not None:
            if now - self._opened_at >= self.options.break_duration:
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = False
                logger.info("CircuitBreaker: OPEN -> HALF_OPEN")

    def _prune(self, now: float) -> None:
        horizon = now - self.options.sampling_duration
        while self._samples and self._samples[0][0] < horizon:
            self._samples.popleft()

    def _open(self, now: float) -> None:
        previous = self._state
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._probe_in_flight = False
        self._samples.clear()
        logger.warning(
            "CircuitBreaker: %s -> OPEN for %.1fs",
            previous.value.upper(), self.options.break_duration
        )

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._opened_at = None
        self._probe_in_flight = False
        self._samples.clear()
        logger.info("CircuitBreaker: HALF_OPEN -> CLOSED")

    async def allow_request(self) -> bool:
        """Check whether a request may be sent now."""
        async with self._lock:
            self._check_state_transition(self._clock())

            if self._state == CircuitState.CLOSED:
                return True

            if self._state == CircuitState.HALF_OPEN and not self._probe_in_flight:
                self._probe_in_flight = True
                return True

            return False

    async def record_success(self) -> None:
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._close()
                return

            now = self._clock()
            self._samples.append((now, False))
            self._prune(now)

    async def record_failure(self) -> None:
        async with self._lock:
            now = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                self._open(now)
                return
            if self._state == CircuitState.OPEN:
                return

            self._samples.append((now, True))
            self._prune(now)

            total = len(self._samples)
            if total < self.options.minimum_throughput:
                return

            failures = sum(1 for _, failed in self._samples if failed)
            if failures and failures / total >= self.options.failure_ratio:
                self._open(now)

    async def release(self) -> None:
        """Forget an admitted request that ended without an outcome (e.g. cancelled)."""
        async with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._probe_in_flight = False

    async def reset(self) -> None:
        async with self._lock:
            self._state = CircuitState.CLOSED
            self._opened_at = None
            self._probe_in_flight = False
            self._samples.clear()

    def __repr__(self) -> str:
        return f"<CircuitBreaker state={self._state.value} samples={len(self._samples)}>"


class CircuitBreakerTransport(DelegatingTransport):
    """Rejects requests with CircuitOpenError while the breaker is open."""

    def __init__(self, inner: httpx.AsyncBaseTransport, breaker: CircuitBreaker):
        super().__init__(inner)
        self.breaker = breaker

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if not await self.breaker.allow_request():
            raise CircuitOpenError(str(request.url), self.breaker.retry_after)

        try:
            response = await self.inner.handle_async_request(request)
        except asyncio.CancelledError:
            await self.breaker.release()
            raise
        except Exception as e:
            if is_transient_error(e):
                await self.breaker.record_failure()
            else:
                await self.breaker.release()
            raise

        if is_transient_status(response.status_code):
            await self.breaker.record_failure()
        else:
            await self.breaker.record_success()
        return response


class CircuitBreakerStrategy(ResilienceStrategy):
    """
    Circuit breaker policy.

    The breaker instance is created with the strategy and shared by every
    request that goes through the wrapped transport.
    """

    name = "circuit_breaker"

    def __init__(
        self,
        options: CircuitBreakerOptions,
        clock: Callable[[], float] = time.monotonic
    ):
        self.options = options
        self.breaker = CircuitBreaker(options, clock=clock)

    def wrap(self, inner: httpx.AsyncBaseTransport) -> httpx.AsyncBaseTransport:
        return CircuitBreakerTransport(inner, self.breaker)
