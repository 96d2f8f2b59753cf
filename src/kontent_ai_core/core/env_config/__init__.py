"""
Client options from the environment and from files.

- settings: KONTENT_* environment variables and .env files (pydantic-settings)
- file_loader: YAML / JSON files with one or several named clients
- watcher: polling hot reload into an OptionsMonitor
"""

from .file_loader import load_options_file, read_config_file
from .settings import (
    ClientFields,
    ClientSettings,
    ENV_PREFIX,
    env_prefix_for,
    load_options_from_env,
    options_from_mapping,
)
from .watcher import OptionsFileWatcher

__all__ = [
    'ClientFields',
    'ClientSettings',
    'ENV_PREFIX',
    'env_prefix_for',
    'load_options_from_env',
    'options_from_mapping',
    'load_options_file',
    'read_config_file',
    'OptionsFileWatcher',
]
