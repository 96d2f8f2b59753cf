"""Tests for YAML / JSON options files."""

import json

import pytest
import yaml

from kontent_ai_core.core.env_config import load_options_file, read_config_file
from kontent_ai_core.core.exceptions import ConfigurationError

ENVIRONMENT_ID = "975bf280-fd91-488c-994c-2f04416e5ee3"


class TestLoadOptionsFile:

    def test_single_client_yaml(self, tmp_path):
        path = tmp_path / "kontent.yaml"
        path.write_text(yaml.dump({
            "environment_id": ENVIRONMENT_ID,
            "base_url": "https://deliver.kontent.ai",
            "retry": {"max_retry_attempts": 5},
        }))

        clients = load_options_file(path)

        assert list(clients) == [""]
        assert clients[""].retry.max_retry_attempts == 5

    def test_file_values_not_mixed_with_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KONTENT_API_KEY", "from-env")
        monkeypatch.setenv("KONTENT_MAX_RETRY_ATTEMPTS", "9")
        path = tmp_path / "kontent.yaml"
        path.write_text(yaml.dump({
            "clients": {
                "management": {"environment_id": ENVIRONMENT_ID, "base_url": "https://manage.kontent.ai/v2"},
            }
        }))

        options = load_options_file(path)["management"]

        assert options.api_key is None
        assert options.retry.max_retry_attempts == 3

    def test_named_clients(self, tmp_path):
        path = tmp_path / "kontent.yml"
        path.write_text(yaml.dump({
            "clients": {
                "production": {"environment_id": ENVIRONMENT_ID, "base_url": "https://deliver.kontent.ai"},
                "preview": {
                    "environment_id": ENVIRONMENT_ID,
                    "base_url": "https://preview-deliver.kontent.ai",
                    "api_key": "preview-key",
                },
            }
        }))

        clients = load_options_file(path)

        assert set(clients) == {"production", "preview"}
        assert clients["preview"].api_key == "preview-key"

    def test_json(self, tmp_path):
        path = tmp_path / "kontent.json"
        path.write_text(json.dumps({"environment_id": ENVIRONMENT_ID, "base_url": "https://deliver.kontent.ai"}))

        assert load_options_file(path)[""].environment_id == ENVIRONMENT_ID

    def test_invalid_client_rejected(self, tmp_path):
        path = tmp_path / "kontent.yaml"
        path.write_text(yaml.dump({"clients": {"broken": {"environment_id": ENVIRONMENT_ID, "base_url": "nope"}}}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_options_file(path)

        assert exc_info.value.field == "base_url"
        assert "kontent.yaml:broken" in str(exc_info.value)

    def test_client_section_must_be_mapping(self, tmp_path):
        path = tmp_path / "kontent.yaml"
        path.write_text(yaml.dump({"clients": {"production": "https://deliver.kontent.ai"}}))

        with pytest.raises(ConfigurationError):
            load_options_file(path)


class TestReadConfigFile:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_config_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "kontent.toml"
        path.write_text("environment_id = 'x'")

        with pytest.raises(ConfigurationError) as exc_info:
            read_config_file(path)

        assert "Unsupported config file format" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "kontent.yaml"
        path.write_text("environment_id: [unclosed")

        with pytest.raises(ConfigurationError) as exc_info:
            read_config_file(path)

        assert "Invalid YAML syntax" in str(exc_info.value)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "kontent.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError):
            read_config_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "kontent.yaml"
        path.write_text("")

        with pytest.raises(ConfigurationError) as exc_info:
            read_config_file(path)

        assert "Empty config file" in str(exc_info.value)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "kontent.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError):
            read_config_file(path)
