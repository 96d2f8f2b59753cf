"""
Pydantic settings for client options.

Reads from:
1. Keyword overrides
2. Environment variables (KONTENT_* or KONTENT_<NAME>_* for named clients)
3. .env file (when given)
4. Defaults

Example .env file:
    KONTENT_ENVIRONMENT_ID=975bf280-fd91-488c-994c-2f04416e5ee3
    KONTENT_BASE_URL=https://deliver.kontent.ai
    KONTENT_API_KEY=ew0KICAiYWxnIjo
    KONTENT_MAX_RETRY_ATTEMPTS=5
    KONTENT_PREVIEW_BASE_URL=https://preview-deliver.kontent.ai
"""

import re
from typing import Any, Dict, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError
from ..options import ClientOptions, DEFAULT_HTTP_CLIENT_NAME

T = TypeVar("T", bound=ClientOptions)

ENV_PREFIX = "KONTENT_"


class ClientFields(BaseModel):
    """Flat, validated view of ClientOptions (no environment sources)."""

    model_config = ConfigDict(extra='ignore')

    environment_id: str = Field(default="", description="Kontent.ai environment ID")
    base_url: str = Field(default="", description="API base URL")
    api_key: Optional[str] = Field(default=None, description="Bearer API key")
    http_client_name: str = Field(default=DEFAULT_HTTP_CLIENT_NAME)
    resilience_enabled: bool = True
    request_timeout: float = Field(default=30.0, gt=0)

    # Retry
    max_retry_attempts: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0)
    retry_max_delay: float = Field(default=30.0, ge=0)
    use_jitter: bool = True
    backoff: Literal["constant", "exponential"] = "exponential"

    # Circuit breaker
    failure_ratio: float = Field(default=0.5, ge=0, le=1)
    sampling_duration: float = Field(default=30.0, gt=0)
    minimum_throughput: int = Field(default=10, ge=1)
    break_duration: float = Field(default=30.0, gt=0)

    def to_options(self, options_type: Type[T] = ClientOptions) -> T:
        """Build (and validate) options of the given type."""
        return options_type.create(**self.model_dump())


class ClientSettings(BaseSettings, ClientFields):
    """ClientFields read from KONTENT_* variables and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )


def _configuration_error(error: ValidationError, prefix: str) -> ConfigurationError:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "settings"
    return ConfigurationError(
        field,
        first.get("input"),
        f"Invalid setting {prefix}{field.upper()}: {first.get('msg')}",
    )


def env_prefix_for(name: Optional[str] = None) -> str:
    """KONTENT_ for the default client, KONTENT_<NAME>_ for a named one."""
    if not name:
        return ENV_PREFIX
    token = re.sub(r"[^A-Za-z0-9]", "_", name).upper()
    return f"{ENV_PREFIX}{token}_"


def load_options_from_env(
    name: Optional[str] = None,
    env_file: Optional[str] = None,
    options_type: Type[T] = ClientOptions,
    **overrides: Any
) -> T:
    """
    Build client options from the environment.

    Args:
        name: Named client (reads KONTENT_<NAME>_*)
        env_file: Optional .env file
        options_type: ClientOptions subclass to create
        **overrides: Values that take precedence over the environment

    Raises:
        ConfigurationError: invalid or missing values

    Example:
        >>> options = load_options_from_env()
        >>> preview = load_options_from_env("preview", env_file=".env")
    """
    prefix = env_prefix_for(name)
    try:
        settings = ClientSettings(_env_prefix=prefix, _env_file=env_file, **overrides)
    except ValidationError as e:
        raise _configuration_error(e, prefix) from e
    return settings.to_options(options_type)


def options_from_mapping(
    data: Dict[str, Any],
    options_type: Type[T] = ClientOptions,
    source: str = "<mapping>"
) -> T:
    """
    Build options from a plain mapping (file section, dict literal).

    Accepts flat keys (as in ClientFields) and nested ``retry`` /
    ``circuit_breaker`` sections. The environment is not consulted.
    """
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if key == "retry" and isinstance(value, dict):
            for retry_key, retry_value in value.items():
                if retry_key in ("base_delay", "max_delay"):
                    retry_key = f"retry_{retry_key}"
                flat[retry_key] = retry_value
        elif key == "circuit_breaker" and isinstance(value, dict):
            flat.update(value)
        else:
            flat[key] = value

    try:
        fields = ClientFields.model_validate(flat)
    except ValidationError as e:
        error = _configuration_error(e, "")
        raise ConfigurationError(
            error.field, error.value, f"{error.reason} (in {source})"
        ) from e
    try:
        return fields.to_options(options_type)
    except ConfigurationError as e:
        raise ConfigurationError(e.field, e.value, f"{e.reason} (in {source})") from e
