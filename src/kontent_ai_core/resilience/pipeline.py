"""
Resilience composer.

Default order (outermost first): retry -> timeout -> circuit breaker.

    - retry sees timeouts and open-circuit rejections of each attempt
    - the timeout bounds a single attempt, not the whole retry sequence
    - the circuit breaker samples the outcome of every attempt

Callers customise the defaults through a ``configure`` callback that
receives the builder after the defaults are installed.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, Tuple

import httpx

from ..core.options import ClientOptions
from .base import ResilienceStrategy
from .circuit_breaker import CircuitBreakerStrategy
from .retry import RetryStrategy, SleepFunc
from .timeout import TimeoutStrategy

logger = logging.getLogger(__name__)


class ResiliencePipeline:
    """Immutable ordered list of strategies, first = outermost."""

    def __init__(self, strategies: Iterable[ResilienceStrategy] = ()):
        self.strategies: Tuple[ResilienceStrategy, ...] = tuple(strategies)

    def wrap(self, inner: httpx.AsyncBaseTransport) -> httpx.AsyncBaseTransport:
        for strategy in reversed(self.strategies):
            inner = strategy.wrap(inner)
        return inner

    def get(self, name: str) -> Optional[ResilienceStrategy]:
        for strategy in self.strategies:
            if strategy.name == name:
                return strategy
        return None

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.strategies]

    def __len__(self) -> int:
        return len(self.strategies)

    def __repr__(self) -> str:
        return f"<ResiliencePipeline {' -> '.join(self.names) or 'empty'}>"


class ResiliencePipelineBuilder:
    """
    Collects strategies for a pipeline.

    Strategies can be appended (they become innermost) or swapped by name.
    There is no removal; disable resilience entirely with
    ``ClientOptions.resilience_enabled=False``.

    Example:
        >>> def configure(builder):
        ...     builder.replace("timeout", TimeoutStrategy(5.0))
        ...     builder.add(MyRateLimitStrategy())
    """

    def __init__(self):
        self._strategies: List[ResilienceStrategy] = []

    def add(self, strategy: ResilienceStrategy) -> "ResiliencePipelineBuilder":
        self._strategies.append(strategy)
        return self

    def replace(self, name: str, strategy: ResilienceStrategy) -> "ResiliencePipelineBuilder":
        for index, existing in enumerate(self._strategies):
            if existing.name == name:
                self._strategies[index] = strategy
                return self
        raise ValueError(
            f"No strategy named '{name}'. Available: {', '.join(self.names) or 'none'}"
        )

    @property
    def names(self) -> List[str]:
        return [s.name for s in self._strategies]

    def build(self) -> ResiliencePipeline:
        return ResiliencePipeline(self._strategies)


ConfigureResilience = Callable[[ResiliencePipelineBuilder], None]


def default_strategies(
    options: ClientOptions,
    sleep: Optional[SleepFunc] = None,
    clock: Callable[[], float] = time.monotonic,
) -> List[ResilienceStrategy]:
    return [
        RetryStrategy(options.retry, sleep=sleep),
        TimeoutStrategy(options.request_timeout),
        CircuitBreakerStrategy(options.circuit_breaker, clock=clock),
    ]


def compose_resilience(
    options: ClientOptions,
    configure: Optional[ConfigureResilience] = None,
    *,
    sleep: Optional[SleepFunc] = None,
    clock: Callable[[], float] = time.monotonic,
) -> ResiliencePipeline:
    """
    Build the resilience pipeline for one client.

    Args:
        options: Client options (resilience_enabled, retry, circuit_breaker, request_timeout)
        configure: Optional customisation applied after the defaults
        sleep: Async sleep used between retries (tests inject a fake)
        clock: Monotonic clock for the circuit breaker (tests inject a fake)

    Returns:
        Empty pipeline when resilience is disabled, defaults (+ customisation) otherwise
    """
    if not options.resilience_enabled:
        logger.debug("Resilience disabled for %s", options.http_client_name)
        return ResiliencePipeline()

    builder = ResiliencePipelineBuilder()
    for strategy in default_strategies(options, sleep=sleep, clock=clock):
        builder.add(strategy)

    if configure is not None:
        configure(builder)

    pipeline = builder.build()
    logger.debug("Resilience for %s: %r", options.http_client_name, pipeline)
    return pipeline
