"""Configuration file loading.

Handles:
- YAML file parsing
- Environment variable overrides
- Conversion from the merged dict to the typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from tailwatch.config.merge import merge_configs
from tailwatch.config.paths import get_config_paths
from tailwatch.config.schema import (
    DEFAULT_LINES_NUMBER,
    Config,
    FileTailConfig,
    LoggingConfig,
    NotifierConfig,
)
from tailwatch.logging import LOG_ENV_VAR
from tailwatch.watching.filters import build_filter
from tailwatch.watching.notifier import NOTIFIER_KINDS

# Module logger (may not be configured yet at import time)
_log = logging.getLogger("tailwatch.config")

_KNOWN_KEYS = {"logging", "notifier", "watchers"}


class ConfigError(Exception):
    """Configuration is present but unusable."""


def load_yaml_file(path: Path, required: bool = False) -> dict[str, Any]:
    """Load a YAML mapping from ``path``.

    Optional files that are missing, unreadable or malformed are logged and
    treated as empty.

    Raises:
        ConfigError: If ``required`` and the file cannot be used.
    """
    if not path.exists():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        if required:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except OSError as e:
        if required:
            raise ConfigError(f"Cannot read {path}: {e}") from e
        _log.warning("Error reading %s: %s", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        if required:
            raise ConfigError(f"{path}: top level must be a mapping")
        _log.warning("Ignoring %s: top level is not a mapping", path)
        return {}
    return data


def env_overrides() -> dict[str, Any]:
    """Config values taken from the environment (highest priority)."""
    overrides: dict[str, Any] = {}

    log_path = os.environ.get(LOG_ENV_VAR)
    if log_path:
        overrides.setdefault("logging", {})["file"] = log_path

    kind = os.environ.get("TAILWATCH_NOTIFIER")
    if kind:
        overrides.setdefault("notifier", {})["kind"] = kind

    return overrides


def _watcher_config(index: int, data: Any) -> FileTailConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"watchers[{index}]: expected a mapping, got {type(data).__name__}")
    if not data.get("file"):
        raise ConfigError(f"watchers[{index}]: 'file' is required")

    lines_number = data.get("lines_number", DEFAULT_LINES_NUMBER)
    if isinstance(lines_number, bool) or not isinstance(lines_number, int) or lines_number < 1:
        raise ConfigError(
            f"watchers[{index}]: 'lines_number' must be a positive integer, got {lines_number!r}"
        )

    watcher = FileTailConfig(
        file=str(data["file"]),
        lines_number=lines_number,
        include=data.get("include"),
        exclude=data.get("exclude"),
        ignore_case=bool(data.get("ignore_case", False)),
        reverse=bool(data.get("reverse", False)),
        description=data.get("description"),
    )
    try:
        build_filter(watcher.include, watcher.exclude, watcher.ignore_case)
    except ValueError as e:
        raise ConfigError(f"watchers[{index}]: {e}") from e
    return watcher


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be a mapping, got {type(section).__name__}")
    return section


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass.

    Raises:
        ConfigError: If a section has the wrong shape or invalid values.
    """
    log_data = _section(data, "logging")
    logging_config = LoggingConfig(
        level=log_data.get("level"),
        verbose=log_data.get("verbose"),
        file=log_data.get("file"),
    )

    notifier_data = _section(data, "notifier")
    kind = notifier_data.get("kind", "watchdog")
    if kind not in NOTIFIER_KINDS:
        raise ConfigError(f"notifier.kind must be one of {NOTIFIER_KINDS}, got {kind!r}")
    try:
        poll_interval = float(notifier_data.get("poll_interval", 1.0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"notifier.poll_interval: {e}") from e
    notifier = NotifierConfig(kind=kind, poll_interval=poll_interval)

    watchers_data = data.get("watchers") or []
    if not isinstance(watchers_data, list):
        raise ConfigError("watchers must be a list")
    watchers = [_watcher_config(i, w) for i, w in enumerate(watchers_data)]

    extra = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}

    return Config(
        logging=logging_config,
        notifier=notifier,
        watchers=watchers,
        extra=extra,
    )


def load_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. ``overrides`` (command-line options)
    2. Environment variables
    3. ``config_path`` (must exist when given)
    4. User config
    5. System config

    Raises:
        ConfigError: If the explicit file is unusable or values are invalid.
    """
    configs: list[dict[str, Any]] = []

    explicit = Path(config_path).expanduser() if config_path else None
    for path in get_config_paths(explicit):
        config_data = load_yaml_file(path, required=path == explicit)
        if config_data:
            _log.debug("Loaded config from %s", path)
            configs.append(config_data)

    env_config = env_overrides()
    if env_config:
        configs.append(env_config)

    if overrides:
        configs.append(overrides)

    return dict_to_config(merge_configs(*configs))
