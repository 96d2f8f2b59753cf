"""
OpenTelemetry integration for kontent-ai-core.

ApiUsageListener implementations that report every logical request as a
span and as metrics. Requires opentelemetry-api (and an SDK to export).

Installation:
    pip install kontent-ai-core[otel]

Example:
    >>> from opentelemetry import trace
    >>> from opentelemetry.sdk.trace import TracerProvider
    >>> from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
    >>>
    >>> provider = TracerProvider()
    >>> provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    >>> trace.set_tracer_provider(provider)
    >>>
    >>> core_options = CoreServicesOptions(api_usage_listener=OpenTelemetryUsageListener())
"""

try:
    import opentelemetry  # noqa: F401
except ImportError as e:
    raise ImportError(
        "OpenTelemetry support requires opentelemetry-api and opentelemetry-sdk. "
        "Install with: pip install kontent-ai-core[otel]"
    ) from e

from .listener import OpenTelemetryUsageListener
from .metrics import OpenTelemetryMetricsListener

__all__ = [
    "OpenTelemetryUsageListener",
    "OpenTelemetryMetricsListener",
]
