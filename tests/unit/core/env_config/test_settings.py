"""Tests for environment-based options loading."""

import os
from dataclasses import dataclass

import pytest

from kontent_ai_core.core.env_config import (
    ClientSettings,
    env_prefix_for,
    load_options_from_env,
    options_from_mapping,
)
from kontent_ai_core.core.exceptions import ConfigurationError
from kontent_ai_core.core.options import BackoffShape, ClientOptions

ENVIRONMENT_ID = "975bf280-fd91-488c-994c-2f04416e5ee3"


@dataclass(frozen=True)
class ManagementOptions(ClientOptions):

    def validate(self) -> None:
        super().validate()
        if not self.has_api_key:
            raise ConfigurationError("api_key", self.api_key, "ApiKey is required")


@pytest.fixture
def clean_env(monkeypatch):
    """Remove KONTENT_* variables inherited from the environment."""
    for key in list(os.environ):
        if key.startswith("KONTENT_"):
            monkeypatch.delenv(key)
    return monkeypatch


class TestEnvPrefix:

    def test_default(self):
        assert env_prefix_for() == "KONTENT_"

    def test_named(self):
        assert env_prefix_for("preview-eu") == "KONTENT_PREVIEW_EU_"


class TestLoadOptionsFromEnv:

    def test_basic(self, clean_env):
        clean_env.setenv("KONTENT_ENVIRONMENT_ID", ENVIRONMENT_ID)
        clean_env.setenv("KONTENT_BASE_URL", "https://deliver.kontent.ai")
        clean_env.setenv("KONTENT_MAX_RETRY_ATTEMPTS", "5")
        clean_env.setenv("KONTENT_BACKOFF", "constant")
        clean_env.setenv("KONTENT_RESILIENCE_ENABLED", "false")

        options = load_options_from_env()

        assert isinstance(options, ClientOptions)
        assert options.environment_id == ENVIRONMENT_ID
        assert options.retry.max_retry_attempts == 5
        assert options.retry.backoff == BackoffShape.CONSTANT
        assert options.resilience_enabled is False

    def test_named_client(self, clean_env):
        clean_env.setenv("KONTENT_ENVIRONMENT_ID", "default-env")
        clean_env.setenv("KONTENT_PREVIEW_ENVIRONMENT_ID", ENVIRONMENT_ID)
        clean_env.setenv("KONTENT_PREVIEW_BASE_URL", "https://preview-deliver.kontent.ai")
        clean_env.setenv("KONTENT_PREVIEW_API_KEY", "preview-key")

        options = load_options_from_env("preview")

        assert options.environment_id == ENVIRONMENT_ID
        assert options.api_key == "preview-key"

    def test_overrides_win(self, clean_env):
        clean_env.setenv("KONTENT_ENVIRONMENT_ID", ENVIRONMENT_ID)
        clean_env.setenv("KONTENT_BASE_URL", "https://deliver.kontent.ai")

        options = load_options_from_env(base_url="https://preview-deliver.kontent.ai")

        assert options.base_url == "https://preview-deliver.kontent.ai"

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            f"KONTENT_ENVIRONMENT_ID={ENVIRONMENT_ID}\n"
            "KONTENT_BASE_URL=https://deliver.kontent.ai\n"
            "KONTENT_REQUEST_TIMEOUT=12.5\n"
        )

        options = load_options_from_env(env_file=str(env_file))

        assert options.request_timeout == 12.5

    def test_missing_required_values(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            load_options_from_env()

        assert exc_info.value.field == "environment_id"

    def test_invalid_type(self, clean_env):
        clean_env.setenv("KONTENT_ENVIRONMENT_ID", ENVIRONMENT_ID)
        clean_env.setenv("KONTENT_BASE_URL", "https://deliver.kontent.ai")
        clean_env.setenv("KONTENT_MAX_RETRY_ATTEMPTS", "many")

        with pytest.raises(ConfigurationError) as exc_info:
            load_options_from_env()

        assert exc_info.value.field == "max_retry_attempts"
        assert "KONTENT_MAX_RETRY_ATTEMPTS" in str(exc_info.value)

    def test_subclass_validation(self, clean_env):
        clean_env.setenv("KONTENT_ENVIRONMENT_ID", ENVIRONMENT_ID)
        clean_env.setenv("KONTENT_BASE_URL", "https://manage.kontent.ai/v2")

        with pytest.raises(ConfigurationError) as exc_info:
            load_options_from_env(options_type=ManagementOptions)

        assert exc_info.value.field == "api_key"


class TestOptionsFromMapping:

    def test_nested_sections(self):
        options = options_from_mapping({
            "environment_id": ENVIRONMENT_ID,
            "base_url": "https://deliver.kontent.ai",
            "retry": {"max_retry_attempts": 1, "base_delay": 0.5, "max_delay": 2},
            "circuit_breaker": {"minimum_throughput": 20},
        })

        assert options.retry.max_retry_attempts == 1
        assert options.retry.base_delay == 0.5
        assert options.retry.max_delay == 2.0
        assert options.circuit_breaker.minimum_throughput == 20

    def test_environment_not_consulted(self, clean_env):
        clean_env.setenv("KONTENT_API_KEY", "from-env")
        clean_env.setenv("KONTENT_REQUEST_TIMEOUT", "-1")

        options = options_from_mapping({"environment_id": ENVIRONMENT_ID, "base_url": "https://deliver.kontent.ai"})

        assert options.api_key is None

    def test_invalid_value_names_source(self):
        with pytest.raises(ConfigurationError) as exc_info:
            options_from_mapping(
                {"environment_id": ENVIRONMENT_ID, "base_url": "https://x.io", "failure_ratio": 3},
                source="kontent.yaml",
            )

        assert "kontent.yaml" in str(exc_info.value)


class TestClientSettings:

    def test_defaults_match_options(self, clean_env):
        settings = ClientSettings(environment_id=ENVIRONMENT_ID, base_url="https://deliver.kontent.ai")

        options = settings.to_options()

        assert options == ClientOptions(environment_id=ENVIRONMENT_ID, base_url="https://deliver.kontent.ai")
