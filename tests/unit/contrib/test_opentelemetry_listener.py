"""
Tests for OpenTelemetry integration.

Tests tracing, metrics, and context propagation.
"""

import httpx
import pytest

pytest.importorskip("opentelemetry.sdk", reason="OpenTelemetry SDK not installed")

from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode

from kontent_ai_core.contrib.opentelemetry import (
    OpenTelemetryMetricsListener,
    OpenTelemetryUsageListener,
)
from kontent_ai_core.core.identity import TrackingHeaders
from kontent_ai_core.core.options import CoreServicesOptions
from kontent_ai_core.core.pipeline import build_transport


TRACKING = TrackingHeaders("pypi.org;kontent-ai-core;1.0.0")


@pytest.fixture
def span_exporter():
    exporter = InMemorySpanExporter()
    yield exporter
    exporter.clear()


@pytest.fixture
def tracer_provider(span_exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider


def make_request(url="https://deliver.kontent.ai/items?depth=1") -> httpx.Request:
    return httpx.Request("GET", url)


class TestOpenTelemetryUsageListener:

    @pytest.mark.asyncio
    async def test_span_per_logical_request(self, options, recording_transport, fake_sleep, tracer_provider, span_exporter):
        inner = recording_transport(503, 200)
        listener = OpenTelemetryUsageListener(tracer_provider=tracer_provider)
        transport = build_transport(
            options,
            CoreServicesOptions(api_usage_listener=listener),
            inner=inner,
            tracking=TRACKING,
            sleep=fake_sleep,
        )

        await transport.handle_async_request(make_request())

        spans = span_exporter.get_finished_spans()
        assert len(spans) == 1
        span = spans[0]
        assert span.name == "GET"
        assert span.kind == SpanKind.CLIENT
        assert span.attributes["http.request.method"] == "GET"
        assert span.attributes["server.address"] == "deliver.kontent.ai"
        assert span.attributes["http.response.status_code"] == 200
        assert span.attributes["kontent.retry_attempts"] == 2
        assert span.status.status_code == StatusCode.OK

    @pytest.mark.asyncio
    async def test_trace_context_propagated_to_every_attempt(self, options, recording_transport, fake_sleep, tracer_provider):
        inner = recording_transport(503, 200)
        transport = build_transport(
            options,
            CoreServicesOptions(api_usage_listener=OpenTelemetryUsageListener(tracer_provider=tracer_provider)),
            inner=inner,
            tracking=TRACKING,
            sleep=fake_sleep,
        )

        await transport.handle_async_request(make_request())

        traceparents = [r.headers.get("traceparent") for r in inner.requests]
        assert traceparents[0] is not None
        assert traceparents[0] == traceparents[1]

    @pytest.mark.asyncio
    async def test_server_error_status(self, tracer_provider, span_exporter):
        listener = OpenTelemetryUsageListener(tracer_provider=tracer_provider)
        request = make_request()

        await listener.on_request_start(request)
        await listener.on_request_end(request, httpx.Response(500), None, 0.1)

        span = span_exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR

    @pytest.mark.asyncio
    async def test_exception_recorded(self, tracer_provider, span_exporter):
        listener = OpenTelemetryUsageListener(tracer_provider=tracer_provider)
        request = make_request()

        await listener.on_request_start(request)
        await listener.on_request_end(request, None, httpx.ConnectError("refused"), 0.1)

        span = span_exporter.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR
        assert span.attributes["error.type"] == "ConnectError"
        assert any(event.name == "exception" for event in span.events)

    @pytest.mark.asyncio
    async def test_sensitive_values_masked(self, tracer_provider, span_exporter):
        listener = OpenTelemetryUsageListener(tracer_provider=tracer_provider, capture_headers=True)
        request = httpx.Request(
            "GET",
            "https://deliver.kontent.ai/items?api_key=secret",
            headers={"Authorization": "Bearer secret"},
        )

        await listener.on_request_start(request)
        await listener.on_request_end(request, httpx.Response(200), None, 0.1)

        attributes = span_exporter.get_finished_spans()[0].attributes
        assert "secret" not in attributes["url.full"]
        assert "secret" not in attributes["http.request.header.authorization"]

    @pytest.mark.asyncio
    async def test_end_without_start(self, tracer_provider, span_exporter):
        listener = OpenTelemetryUsageListener(tracer_provider=tracer_provider)

        await listener.on_request_end(make_request(), httpx.Response(200), None, 0.1)

        assert span_exporter.get_finished_spans() == ()


class TestOpenTelemetryMetricsListener:

    @pytest.mark.asyncio
    async def test_metrics_recorded(self):
        reader = InMemoryMetricReader()
        listener = OpenTelemetryMetricsListener(meter_provider=MeterProvider(metric_readers=[reader]))
        request = make_request()

        await listener.on_request_start(request)
        await listener.on_request_end(request, httpx.Response(200), None, 0.25)
        await listener.on_request_start(request)
        await listener.on_request_end(request, None, httpx.ConnectError("refused"), 0.5)

        data = reader.get_metrics_data()
        metrics = {
            metric.name: metric
            for resource_metrics in data.resource_metrics
            for scope_metrics in resource_metrics.scope_metrics
            for metric in scope_metrics.metrics
        }

        counter_points = metrics["kontent_client_requests_total"].data.data_points
        statuses = {point.attributes["status"]: point.value for point in counter_points}
        assert statuses == {"200": 1, "error": 1}
        assert "kontent_client_request_duration_seconds" in metrics


class TestTracingAndMetricsTogether:

    @pytest.mark.asyncio
    async def test_both_listeners_active(self, options, recording_transport, fake_sleep, tracer_provider, span_exporter):
        reader = InMemoryMetricReader()
        core_options = CoreServicesOptions(api_usage_listener=[
            OpenTelemetryUsageListener(tracer_provider=tracer_provider),
            OpenTelemetryMetricsListener(meter_provider=MeterProvider(metric_readers=[reader])),
        ])
        transport = build_transport(
            options, core_options, inner=recording_transport(200), tracking=TRACKING, sleep=fake_sleep
        )

        await transport.handle_async_request(make_request())

        assert len(span_exporter.get_finished_spans()) == 1
        names = {
            metric.name
            for resource_metrics in reader.get_metrics_data().resource_metrics
            for scope_metrics in resource_metrics.scope_metrics
            for metric in scope_metrics.metrics
        }
        assert "kontent_client_requests_total" in names
