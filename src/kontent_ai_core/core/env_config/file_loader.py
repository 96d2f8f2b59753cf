"""
Client options from YAML and JSON files.

Single client:

    environment_id: 975bf280-fd91-488c-994c-2f04416e5ee3
    base_url: https://deliver.kontent.ai
    retry:
      max_retry_attempts: 5

Several named clients:

    clients:
      production:
        environment_id: 975bf280-fd91-488c-994c-2f04416e5ee3
        base_url: https://deliver.kontent.ai
      preview:
        environment_id: 975bf280-fd91-488c-994c-2f04416e5ee3
        base_url: https://preview-deliver.kontent.ai
        api_key: ew0KICAiYWxnIjo
"""

import json
from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

import yaml

from ..exceptions import ConfigurationError
from ..options import ClientOptions
from ..options_monitor import DEFAULT_NAME
from .settings import options_from_mapping

T = TypeVar("T", bound=ClientOptions)


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse a YAML (.yaml/.yml) or JSON (.json) file into a mapping.

    Raises:
        FileNotFoundError: file does not exist
        ConfigurationError: unsupported format, invalid syntax or empty file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, "r", encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    "path", str(path),
                    f"Unsupported config file format: {suffix}. "
                    "Supported formats: .yaml, .yml, .json"
                )
    except yaml.YAMLError as e:
        raise ConfigurationError("path", str(path), f"Invalid YAML syntax in {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError("path", str(path), f"Invalid JSON syntax in {path}: {e}") from e

    if not data:
        raise ConfigurationError("path", str(path), f"Empty config file: {path}")
    if not isinstance(data, dict):
        raise ConfigurationError(
            "path", str(path),
            f"Config must be a mapping, got {type(data).__name__} in {path}"
        )
    return data


def load_options_file(
    path: Union[str, Path],
    options_type: Type[T] = ClientOptions
) -> Dict[str, T]:
    """
    Load every client defined in a config file.

    Returns:
        Mapping of client name to options; a single-client file yields
        one entry under the default name ("")

    Example:
        >>> clients = load_options_file("kontent.yaml")
        >>> clients["preview"].base_url
        'https://preview-deliver.kontent.ai'
    """
    data = read_config_file(path)
    source = str(path)

    if "clients" not in data:
        return {DEFAULT_NAME: options_from_mapping(data, options_type, source)}

    clients = data["clients"]
    if not isinstance(clients, dict) or not clients:
        raise ConfigurationError("clients", clients, f"'clients' must be a non-empty mapping in {source}")

    result: Dict[str, T] = {}
    for name, section in clients.items():
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"clients.{name}", section, f"Client '{name}' must be a mapping in {source}"
            )
        result[str(name)] = options_from_mapping(section, options_type, f"{source}:{name}")
    return result
