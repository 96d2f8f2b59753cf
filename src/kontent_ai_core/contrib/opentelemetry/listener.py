"""
OpenTelemetry tracing listener.

One client span per logical request (all retry attempts), with HTTP
semantic-convention attributes. W3C trace context is injected into the
request headers, so every attempt carries the same traceparent.
"""

import logging
from typing import Dict, Optional

import httpx
from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from ...listeners.base import ApiUsageListener
from ...core.headers import RETRY_ATTEMPTS_EXTENSION
from ...utils.sanitizer import mask_headers, mask_url

logger = logging.getLogger(__name__)

SPAN_EXTENSION = "kontent_otel_span"
RETRY_ATTEMPTS_ATTRIBUTE = "kontent.retry_attempts"


class OpenTelemetryUsageListener(ApiUsageListener):
    """
    Traces API usage.

    Args:
        tracer_name: Name passed to trace.get_tracer()
        tracer_provider: Provider to use (global provider if None)
        propagate_context: Inject W3C trace context headers
        capture_headers: Record request headers (sensitive values masked)
        max_header_length: Truncate header values in attributes

    Example:
        >>> listener = OpenTelemetryUsageListener()
        >>> core_options = CoreServicesOptions(api_usage_listener=listener)
    """

    def __init__(
        self,
        tracer_name: str = "kontent_ai_core",
        tracer_provider: Optional[trace.TracerProvider] = None,
        propagate_context: bool = True,
        capture_headers: bool = False,
        max_header_length: int = 256,
    ):
        self.tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)
        self.propagator = TraceContextTextMapPropagator()
        self.propagate_context = propagate_context
        self.capture_headers = capture_headers
        self.max_header_length = max_header_length

    def _header_attributes(self, request: httpx.Request) -> Dict[str, str]:
        attributes = {}
        for key, value in mask_headers(dict(request.headers)).items():
            key = key.lower()
            if len(value) > self.max_header_length:
                value = value[:self.max_header_length] + "..."
            attributes[f"http.request.header.{key}"] = value
        return attributes

    async def on_request_start(self, request: httpx.Request) -> None:
        method = request.method.upper()
        url = request.url

        span = self.tracer.start_span(method, kind=SpanKind.CLIENT)
        span.set_attribute("http.request.method", method)
        span.set_attribute("url.full", mask_url(str(url)))
        span.set_attribute("url.scheme", url.scheme)
        span.set_attribute("server.address", url.host)
        if url.port:
            span.set_attribute("server.port", url.port)

        if self.capture_headers:
            for key, value in self._header_attributes(request).items():
                span.set_attribute(key, value)

        if self.propagate_context:
            carrier: Dict[str, str] = {}
            self.propagator.inject(carrier, context=trace.set_span_in_context(span))
            for key, value in carrier.items():
                request.headers[key] = value

        request.extensions[SPAN_EXTENSION] = span

    async def on_request_end(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
        elapsed: float
    ) -> None:
        span: Optional[Span] = request.extensions.pop(SPAN_EXTENSION, None)
        if span is None:
            logger.debug("No active span for %s %s", request.method, request.url)
            return

        try:
            if response is not None:
                span.set_attribute("http.response.status_code", response.status_code)
                attempts = response.extensions.get(RETRY_ATTEMPTS_EXTENSION)
                if attempts is not None:
                    span.set_attribute(RETRY_ATTEMPTS_ATTRIBUTE, attempts)
                if response.status_code >= 500:
                    span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
                else:
                    span.set_status(Status(StatusCode.OK))

            if error is not None:
                span.set_attribute("error.type", type(error).__name__)
                if isinstance(error, Exception):
                    span.record_exception(error)
                span.set_status(Status(StatusCode.ERROR, str(error) or type(error).__name__))
        finally:
            span.end()

    def __repr__(self) -> str:
        return f"OpenTelemetryUsageListener(tracer={self.tracer})"
