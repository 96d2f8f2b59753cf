"""
LoggingConfig - how the ``kontent_ai_core`` logger tree writes output.

Components are the sub-packages under ``kontent_ai_core`` (``resilience``,
``middleware``, ``listeners``, ``core.env_config``...). Each can get its
own level, e.g. retry chatter at DEBUG while the rest stays at WARNING.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..exceptions import ConfigurationError

LOG_ENV_PREFIX = "KONTENT_LOG_"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def parse(cls, value: Any, setting: str = "level") -> "LogLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ConfigurationError(
                setting, value,
                f"Unknown log level '{value}'. Available: {', '.join(m.value for m in cls)}"
            ) from None


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"

    @classmethod
    def parse(cls, value: Any) -> "LogFormat":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                "format", value,
                f"Unknown log format '{value}'. Available: json, text"
            ) from None


@dataclass(frozen=True)
class LoggingConfig:
    """
    Output settings for the library logger.

    Attributes:
        level: Level of the ``kontent_ai_core`` logger
        format: ``text`` for humans, ``json`` for log shippers
        enable_console: Write to stderr
        file_path: Also write to this rotating file (disabled if None)
        max_bytes: Rotation size of the log file
        backup_count: Rotated files kept
        component_levels: Per-component overrides, e.g. ``{"resilience": DEBUG}``
        extra_fields: Static fields attached to every record (service, region...)

    Example:
        >>> LoggingConfig.create(
        ...     level="WARNING",
        ...     format="json",
        ...     component_levels={"resilience.retry": "DEBUG"},
        ...     extra_fields={"service": "content-importer"},
        ... )
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    component_levels: Dict[str, LogLevel] = field(default_factory=dict)
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.max_bytes <= 0:
            raise ConfigurationError("max_bytes", self.max_bytes, "max_bytes must be positive")
        if self.backup_count < 0:
            raise ConfigurationError(
                "backup_count", self.backup_count, "backup_count must be non-negative"
            )
        for component in self.component_levels:
            if not component or component.startswith("kontent_ai_core"):
                raise ConfigurationError(
                    "component_levels", component,
                    "Component names are relative to kontent_ai_core, e.g. 'resilience.retry'"
                )

    @property
    def file_enabled(self) -> bool:
        return bool(self.file_path)

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        file_path: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        component_levels: Optional[Mapping[str, str]] = None,
        extra_fields: Optional[Dict[str, Any]] = None
    ) -> "LoggingConfig":
        """Build from plain strings (case-insensitive)."""
        return cls(
            level=LogLevel.parse(level),
            format=LogFormat.parse(format),
            enable_console=enable_console,
            file_path=file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            component_levels={
                name: LogLevel.parse(value, f"component_levels.{name}")
                for name, value in (component_levels or {}).items()
            },
            extra_fields=dict(extra_fields or {}),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LoggingConfig":
        """
        Read KONTENT_LOG_LEVEL, KONTENT_LOG_FORMAT, KONTENT_LOG_FILE and
        KONTENT_LOG_CONSOLE. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ

        def read(name: str, default: str) -> str:
            return env.get(f"{LOG_ENV_PREFIX}{name}", default)

        console = read("CONSOLE", "true").strip().lower() not in ("0", "false", "no", "off")
        return cls.create(
            level=read("LEVEL", "INFO"),
            format=read("FORMAT", "text"),
            enable_console=console,
            file_path=read("FILE", "") or None,
        )
