"""Platform-aware configuration path resolution.

- Windows: %PROGRAMDATA% (system), %APPDATA% (user)
- Unix: /etc/tailwatch/ (system), $XDG_CONFIG_HOME, ~/.config/tailwatch/
  or ~/.tailwatch/ (user)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

CONFIG_FILENAME = "config.yaml"
APP_NAME = "tailwatch"
SHORT_NAME = ".tailwatch"


def get_system_config_path() -> Path | None:
    """System-level config path (may not exist)."""
    if sys.platform == "win32":
        program_data = os.environ.get("PROGRAMDATA")
        if program_data:
            return Path(program_data) / APP_NAME / CONFIG_FILENAME
        return None
    return Path("/etc") / APP_NAME / CONFIG_FILENAME


def get_user_config_path() -> Path | None:
    """User-level config path (may not exist)."""
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME / CONFIG_FILENAME
        return None

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME / CONFIG_FILENAME

    home = Path.home()
    xdg_default = home / ".config"
    if xdg_default.exists():
        return xdg_default / APP_NAME / CONFIG_FILENAME
    return home / SHORT_NAME / CONFIG_FILENAME


def get_config_paths(explicit: str | Path | None = None) -> list[Path]:
    """All config paths, lowest priority first.

    Args:
        explicit: A config file named on the command line; it overrides
            the system and user files.
    """
    paths = [p for p in (get_system_config_path(), get_user_config_path()) if p]
    if explicit:
        paths.append(Path(explicit).expanduser())
    return paths
