"""
Apply a LoggingConfig to the library logger.

Only the ``kontent_ai_core`` logger tree is touched; the application's
root logger configuration is left alone.
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from .config import LoggingConfig
from .formatters import ROOT_LOGGER, get_formatter

LIBRARY_LOGGER = ROOT_LOGGER

_MANAGED_ATTR = "_kontent_managed"

_lock = threading.Lock()
_tuned_components: Set[str] = set()


class ExtraFieldsFilter(logging.Filter):
    """Adds static fields to every record (explicit ``extra=`` wins)."""

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def create_file_handler(
    file_path: str,
    formatter: logging.Formatter,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> RotatingFileHandler:
    """Rotating file handler; the parent directory is created if missing."""
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=file_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def _remove_managed_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_ATTR, False):
            logger.removeHandler(handler)
            handler.close()


def _reset_components() -> None:
    for component in _tuned_components:
        logging.getLogger(f"{LIBRARY_LOGGER}.{component}").setLevel(logging.NOTSET)
    _tuned_components.clear()


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Configure the ``kontent_ai_core`` logger tree.

    Handlers and component levels from a previous call are replaced, so
    calling it again with a new config is safe.

    Example:
        >>> configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
    """
    logger = logging.getLogger(LIBRARY_LOGGER)

    with _lock:
        _remove_managed_handlers(logger)
        _reset_components()

        logger.setLevel(config.level.value)
        for component, level in config.component_levels.items():
            logging.getLogger(f"{LIBRARY_LOGGER}.{component}").setLevel(level.value)
            _tuned_components.add(component)

        formatter = get_formatter(config.format.value)
        handlers: List[logging.Handler] = []
        if config.enable_console:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(formatter)
            handlers.append(console)
        if config.file_enabled:
            handlers.append(create_file_handler(
                config.file_path,
                formatter,
                max_bytes=config.max_bytes,
                backup_count=config.backup_count,
            ))

        extra_filter = ExtraFieldsFilter(config.extra_fields) if config.extra_fields else None
        for handler in handlers:
            setattr(handler, _MANAGED_ATTR, True)
            if extra_filter is not None:
                handler.addFilter(extra_filter)
            logger.addHandler(handler)

    return logger


def reset_logging() -> None:
    """Undo configure_logging(): managed handlers and component levels."""
    logger = logging.getLogger(LIBRARY_LOGGER)
    with _lock:
        _remove_managed_handlers(logger)
        _reset_components()
    logger.setLevel(logging.NOTSET)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the library logger."""
    if not name:
        return logging.getLogger(LIBRARY_LOGGER)
    return logging.getLogger(f"{LIBRARY_LOGGER}.{name}")
