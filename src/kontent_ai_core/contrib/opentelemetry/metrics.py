"""
OpenTelemetry metrics listener.

Collects:
- kontent_client_requests_total: logical requests (Counter)
- kontent_client_request_duration_seconds: duration incl. retries (Histogram)
- kontent_client_active_requests: requests in flight (UpDownCounter)

Labels: method, host, status (HTTP status code or "error").
"""

from typing import Dict, Optional

import httpx
from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, UpDownCounter

from ...listeners.base import ApiUsageListener


class OpenTelemetryMetricsListener(ApiUsageListener):
    """
    Example:
        >>> from opentelemetry.sdk.metrics import MeterProvider
        >>> from opentelemetry.sdk.metrics.export import InMemoryMetricReader
        >>>
        >>> reader = InMemoryMetricReader()
        >>> listener = OpenTelemetryMetricsListener(
        ...     meter_provider=MeterProvider(metric_readers=[reader])
        ... )
    """

    def __init__(
        self,
        meter_name: str = "kontent_ai_core",
        meter_provider: Optional[metrics.MeterProvider] = None
    ):
        self.meter = metrics.get_meter(meter_name, meter_provider=meter_provider)

        self.request_counter: Counter = self.meter.create_counter(
            name="kontent_client_requests_total",
            description="Total number of Kontent.ai API requests",
            unit="requests",
        )
        self.request_duration: Histogram = self.meter.create_histogram(
            name="kontent_client_request_duration_seconds",
            description="Kontent.ai API request duration including retries",
            unit="s",
        )
        self.active_requests: UpDownCounter = self.meter.create_up_down_counter(
            name="kontent_client_active_requests",
            description="Number of Kontent.ai API requests in flight",
            unit="requests",
        )

    @staticmethod
    def _labels(request: httpx.Request, status: Optional[str] = None) -> Dict[str, str]:
        labels = {
            "method": request.method.upper(),
            "host": request.url.host or "unknown",
        }
        if status is not None:
            labels["status"] = status
        return labels

    async def on_request_start(self, request: httpx.Request) -> None:
        self.active_requests.add(1, self._labels(request))

    async def on_request_end(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response],
        error: Optional[BaseException],
        elapsed: float
    ) -> None:
        self.active_requests.add(-1, self._labels(request))

        status = str(response.status_code) if response is not None else "error"
        labels = self._labels(request, status)
        self.request_counter.add(1, labels)
        self.request_duration.record(elapsed, labels)
