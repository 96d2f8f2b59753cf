"""
Formatters for the library logger.

Both show the component (logger name relative to ``kontent_ai_core``)
instead of the full dotted path, and append ``extra={...}`` fields with
secrets masked.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from ...utils.sanitizer import mask_sensitive_data

ROOT_LOGGER = "kontent_ai_core"

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "component",
}


def component_of(logger_name: str) -> str:
    """``kontent_ai_core.resilience.retry`` -> ``resilience.retry``."""
    if logger_name == ROOT_LOGGER:
        return "core"
    if logger_name.startswith(ROOT_LOGGER + "."):
        return logger_name[len(ROOT_LOGGER) + 1:]
    return logger_name


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    extras = {
        key: value for key, value in vars(record).items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }
    return mask_sensitive_data(extras)


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

        {"ts": "2024-01-15T10:30:45.123000+00:00", "level": "WARNING",
         "component": "resilience.retry", "msg": "Retry attempt 1/3 after 1.00s (HTTP 503)",
         "client": "kontent-ai-client-production"}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "component": component_of(record.name),
            "msg": record.getMessage(),
        }
        for key, value in record_extras(record).items():
            entry.setdefault(key, value)
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """``2024-01-15 10:30:45 WARNING  resilience.retry: message key=value``"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s %(component)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        record.component = component_of(record.name)
        line = super().format(record)
        extras = record_extras(record)
        if extras:
            line = f"{line} " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return line


_FORMATTERS: Dict[str, Callable[[], logging.Formatter]] = {
    "json": JSONFormatter,
    "text": TextFormatter,
}


def get_formatter(format_type: str) -> logging.Formatter:
    """
    Raises:
        ValueError: unknown format name
    """
    factory = _FORMATTERS.get(format_type.lower())
    if factory is None:
        raise ValueError(
            f"Unknown format type: {format_type}. Available: {', '.join(_FORMATTERS)}"
        )
    return factory()
