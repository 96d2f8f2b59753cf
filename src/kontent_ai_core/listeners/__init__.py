"""API usage listeners (telemetry hooks)."""

from .base import ApiUsageListener, NoOpApiUsageListener, NO_OP_LISTENER
from .composite import CompositeApiUsageListener
from .logging_listener import LoggingApiUsageListener

__all__ = [
    "ApiUsageListener",
    "CompositeApiUsageListener",
    "NoOpApiUsageListener",
    "NO_OP_LISTENER",
    "LoggingApiUsageListener",
]
