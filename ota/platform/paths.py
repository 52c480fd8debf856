"""Platform-aware user directories."""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path

__all__ = [
    "home",
    "user_config_dir",
    "user_config_path",
]

APP_NAME = "ota"


def _is_windows() -> bool:
    return sys.platform.startswith("win")


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Env vars first so CI containers with a synthetic HOME behave.
    """
    if _is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Directory holding config.toml.

    ~/.config/ota (or $XDG_CONFIG_HOME/ota) on Unix, %APPDATA%/ota on Windows.
    """
    if _is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return home() / ".config" / APP_NAME


def user_config_path() -> Path:
    """Path of the user config file, honoring OTA_CONFIG."""
    override = os.environ.get("OTA_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return user_config_dir() / "config.toml"


def clear_caches() -> None:
    """Clear cached paths (tests that change HOME/APPDATA)."""
    home.cache_clear()
    user_config_dir.cache_clear()
