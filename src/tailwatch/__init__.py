"""tailwatch: bounded ``tail -f`` for asyncio applications."""

__version__ = "0.1.0"

# Public API
from tailwatch.config import Config, ConfigError, load_config
from tailwatch.engine import Engine
from tailwatch.watching import (
    EmitOrder,
    FileTailWatcher,
    Level,
    LogLine,
    PollingNotifier,
    Status,
    WatchdogNotifier,
    Watcher,
    WatcherState,
    WatchSpec,
    build_filter,
)

__all__ = [
    # Main entry points
    "Engine",
    "FileTailWatcher",
    "WatchSpec",
    "EmitOrder",
    # Statuses
    "Level",
    "LogLine",
    "Status",
    "Watcher",
    "WatcherState",
    # Notifiers
    "PollingNotifier",
    "WatchdogNotifier",
    # Filters
    "build_filter",
    # Config
    "Config",
    "ConfigError",
    "load_config",
]
