"""
Logging setup for Kontent.ai clients.

Example:
    >>> from kontent_ai_core.core.logging import LoggingConfig, configure_logging
    >>>
    >>> configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .formatters import JSONFormatter, TextFormatter, get_formatter
from .logger import (
    ExtraFieldsFilter,
    configure_logging,
    create_file_handler,
    get_logger,
    reset_logging,
)

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "get_formatter",
    # Logger
    "ExtraFieldsFilter",
    "configure_logging",
    "create_file_handler",
    "get_logger",
    "reset_logging",
]
