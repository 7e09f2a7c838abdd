"""Configuration management for tailwatch.

Layered YAML configuration:
- System-level config (/etc/tailwatch/ or %PROGRAMDATA%)
- User-level config (~/.config/tailwatch/, ~/.tailwatch/ or %APPDATA%)
- An explicit file given with --config
- Environment variable overrides (TAILWATCH_LOG, TAILWATCH_NOTIFIER)

Example usage:
    from tailwatch.config import load_config

    config = load_config("watch.yaml")
    for watcher in config.watchers:
        print(watcher.to_watch_spec())
"""

from tailwatch.config.loader import (
    ConfigError,
    dict_to_config,
    load_config,
    load_yaml_file,
)
from tailwatch.config.paths import (
    get_config_paths,
    get_system_config_path,
    get_user_config_path,
)
from tailwatch.config.schema import (
    Config,
    FileTailConfig,
    LoggingConfig,
    NotifierConfig,
)

__all__ = [
    # Main API
    "Config",
    "ConfigError",
    "load_config",
    "load_yaml_file",
    "dict_to_config",
    # Schema types
    "FileTailConfig",
    "LoggingConfig",
    "NotifierConfig",
    # Path utilities
    "get_config_paths",
    "get_system_config_path",
    "get_user_config_path",
]
