"""Tests for the resilience composer."""

import dataclasses

import httpx
import pytest

from kontent_ai_core.resilience.base import ResilienceStrategy
from kontent_ai_core.resilience.circuit_breaker import CircuitBreakerTransport
from kontent_ai_core.resilience.pipeline import (
    ResiliencePipeline,
    ResiliencePipelineBuilder,
    compose_resilience,
    default_strategies,
)
from kontent_ai_core.resilience.retry import RetryTransport
from kontent_ai_core.resilience.timeout import TimeoutStrategy, TimeoutTransport
from kontent_ai_core.middleware.base import DelegatingTransport


class HeaderStrategy(ResilienceStrategy):
    """Adds a marker header, used to check ordering."""

    name = "marker"

    def wrap(self, inner):
        strategy = self

        class MarkerTransport(DelegatingTransport):
            async def handle_async_request(self, request):
                request.headers["X-Marker"] = strategy.name
                return await self.inner.handle_async_request(request)

        return MarkerTransport(inner)


def chain(transport):
    """Transport classes from outermost to innermost."""
    classes = []
    while isinstance(transport, DelegatingTransport):
        classes.append(type(transport))
        transport = transport.inner
    return classes


class TestComposeResilience:

    def test_default_order(self, options):
        pipeline = compose_resilience(options)

        assert pipeline.names == ["retry", "timeout", "circuit_breaker"]

    def test_wrap_order(self, options, recording_transport):
        transport = compose_resilience(options).wrap(recording_transport(200))

        assert chain(transport) == [RetryTransport, TimeoutTransport, CircuitBreakerTransport]

    def test_disabled(self, options, recording_transport):
        disabled = dataclasses.replace(options, resilience_enabled=False)
        inner = recording_transport(200)

        pipeline = compose_resilience(disabled)

        assert len(pipeline) == 0
        assert pipeline.wrap(inner) is inner

    def test_configure_replaces_strategy(self, options):
        def configure(builder):
            builder.replace("timeout", TimeoutStrategy(5.0))

        pipeline = compose_resilience(options, configure)

        assert pipeline.get("timeout").timeout == 5.0
        assert pipeline.names == ["retry", "timeout", "circuit_breaker"]

    def test_configure_adds_innermost(self, options):
        pipeline = compose_resilience(options, lambda builder: builder.add(HeaderStrategy()))

        assert pipeline.names[-1] == "marker"

    def test_configure_ignored_when_disabled(self, options):
        disabled = dataclasses.replace(options, resilience_enabled=False)
        calls = []

        compose_resilience(disabled, calls.append)

        assert calls == []

    def test_default_strategies_use_options(self, options):
        retry, timeout, breaker = default_strategies(options)

        assert retry.options is options.retry
        assert timeout.timeout == options.request_timeout
        assert breaker.options is options.circuit_breaker


class TestResiliencePipelineBuilder:

    def test_replace_unknown_name(self):
        builder = ResiliencePipelineBuilder()

        with pytest.raises(ValueError) as exc_info:
            builder.replace("retry", TimeoutStrategy(1.0))

        assert "No strategy named 'retry'" in str(exc_info.value)

    def test_build_is_snapshot(self):
        builder = ResiliencePipelineBuilder().add(TimeoutStrategy(1.0))
        pipeline = builder.build()
        builder.add(HeaderStrategy())

        assert pipeline.names == ["timeout"]

    @pytest.mark.asyncio
    async def test_custom_strategy_runs(self, recording_transport):
        inner = recording_transport(200)
        transport = ResiliencePipeline([HeaderStrategy()]).wrap(inner)

        await transport.handle_async_request(httpx.Request("GET", "https://deliver.kontent.ai/items"))

        assert inner.requests[0].headers["X-Marker"] == "marker"
