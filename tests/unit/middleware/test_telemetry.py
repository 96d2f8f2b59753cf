"""Tests for TelemetryTransport and usage listeners."""

import asyncio
import logging
from typing import List, Optional

import httpx
import pytest

from kontent_ai_core.core.exceptions import TelemetryListenerError
from kontent_ai_core.core.options import TelemetryExceptionBehavior
from kontent_ai_core.listeners import ApiUsageListener, LoggingApiUsageListener
from kontent_ai_core.middleware.telemetry import TelemetryTransport


class RecordingListener(ApiUsageListener):

    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.started: List[httpx.Request] = []
        self.ended: List[tuple] = []

    async def on_request_start(self, request):
        self.started.append(request)
        if self.fail_on == "start":
            raise RuntimeError("listener start failed")

    async def on_request_end(self, request, response, error, elapsed):
        self.ended.append((request, response, error, elapsed))
        if self.fail_on == "end":
            raise RuntimeError("listener end failed")


class SlowTransport(httpx.AsyncBaseTransport):

    async def handle_async_request(self, request):
        await asyncio.sleep(10)
        return httpx.Response(200, request=request)


def make_request() -> httpx.Request:
    return httpx.Request("GET", "https://deliver.kontent.ai/items")


class TestTelemetryTransport:

    @pytest.mark.asyncio
    async def test_success_reported_once(self, recording_transport):
        listener = RecordingListener()
        transport = TelemetryTransport(recording_transport(200), listener)

        response = await transport.handle_async_request(make_request())

        assert len(listener.started) == 1
        assert len(listener.ended) == 1
        _, reported, error, elapsed = listener.ended[0]
        assert reported is response
        assert error is None
        assert elapsed >= 0

    @pytest.mark.asyncio
    async def test_failure_reported_and_reraised(self, recording_transport):
        listener = RecordingListener()
        failure = httpx.ConnectError("refused")
        transport = TelemetryTransport(recording_transport(failure), listener)

        with pytest.raises(httpx.ConnectError):
            await transport.handle_async_request(make_request())

        _, response, error, _ = listener.ended[0]
        assert response is None
        assert error is failure

    @pytest.mark.asyncio
    async def test_listener_error_logged_and_request_continues(self, recording_transport, caplog):
        listener = RecordingListener(fail_on="start")
        transport = TelemetryTransport(recording_transport(200), listener)

        with caplog.at_level(logging.WARNING, logger="kontent_ai_core"):
            response = await transport.handle_async_request(make_request())

        assert response.status_code == 200
        assert len(listener.ended) == 1
        assert "on_request_start failed" in caplog.text

    @pytest.mark.asyncio
    async def test_end_listener_error_keeps_response(self, recording_transport):
        transport = TelemetryTransport(recording_transport(201), RecordingListener(fail_on="end"))

        response = await transport.handle_async_request(make_request())

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_listener_error_thrown_when_configured(self, recording_transport):
        inner = recording_transport(200)
        transport = TelemetryTransport(
            inner,
            RecordingListener(fail_on="start"),
            behavior=TelemetryExceptionBehavior.THROW_EXCEPTION,
        )

        with pytest.raises(TelemetryListenerError) as exc_info:
            await transport.handle_async_request(make_request())

        assert exc_info.value.hook == "on_request_start"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert inner.calls == 0

    @pytest.mark.asyncio
    async def test_end_listener_error_thrown_when_configured(self, recording_transport):
        transport = TelemetryTransport(
            recording_transport(200),
            RecordingListener(fail_on="end"),
            behavior=TelemetryExceptionBehavior.THROW_EXCEPTION,
        )

        with pytest.raises(TelemetryListenerError) as exc_info:
            await transport.handle_async_request(make_request())

        assert exc_info.value.hook == "on_request_end"

    @pytest.mark.asyncio
    async def test_cancellation_reported(self):
        listener = RecordingListener()
        transport = TelemetryTransport(SlowTransport(), listener)

        task = asyncio.create_task(transport.handle_async_request(make_request()))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(listener.ended) == 1
        assert isinstance(listener.ended[0][2], asyncio.CancelledError)

    @pytest.mark.asyncio
    async def test_no_listener(self, recording_transport):
        transport = TelemetryTransport(recording_transport(200))

        response = await transport.handle_async_request(make_request())

        assert response.status_code == 200


class TestLoggingApiUsageListener:

    @pytest.mark.asyncio
    async def test_logs_masked_url(self, recording_transport, caplog):
        transport = TelemetryTransport(recording_transport(200), LoggingApiUsageListener())
        request = httpx.Request("GET", "https://deliver.kontent.ai/items?api_key=secret")

        with caplog.at_level(logging.INFO, logger="kontent_ai_core"):
            await transport.handle_async_request(request)

        assert "Received 200" in caplog.text
        assert "secret" not in caplog.text

    @pytest.mark.asyncio
    async def test_logs_failure(self, recording_transport, caplog):
        transport = TelemetryTransport(
            recording_transport(httpx.ConnectError("refused")), LoggingApiUsageListener()
        )

        with caplog.at_level(logging.INFO, logger="kontent_ai_core"):
            with pytest.raises(httpx.ConnectError):
                await transport.handle_async_request(make_request())

        assert "ConnectError" in caplog.text

    @pytest.mark.asyncio
    async def test_slow_request_warning(self, recording_transport, caplog):
        listener = LoggingApiUsageListener(slow_request_threshold=0.0)
        transport = TelemetryTransport(recording_transport(200), listener)

        with caplog.at_level(logging.WARNING, logger="kontent_ai_core"):
            await transport.handle_async_request(make_request())

        assert "Slow request" in caplog.text

    @pytest.mark.asyncio
    async def test_headers_masked(self, caplog):
        listener = LoggingApiUsageListener(log_headers=True)
        request = httpx.Request("GET", "https://deliver.kontent.ai/items", headers={"Authorization": "Bearer secret"})

        with caplog.at_level(logging.DEBUG, logger="kontent_ai_core"):
            await listener.on_request_start(request)

        assert "Request headers" in caplog.text
        assert "Bearer secret" not in caplog.text
