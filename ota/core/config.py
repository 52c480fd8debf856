"""Typed user configuration.

The user config lives at `<user_config_dir>/config.toml`:

    [api]
    url = "https://api.expo.dev/graphql"
    timeout = 30

    [auth]
    token = "..."

    [website]
    url = "https://expo.dev"

Environment variables take precedence over the file (see `apply_env`).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "ApiConfig",
    "AuthConfig",
    "Config",
    "ConfigError",
    "DEFAULT_API_URL",
    "DEFAULT_API_TIMEOUT_SECONDS",
    "DEFAULT_WEBSITE_URL",
    "ENV_API_URL",
    "ENV_CONFIG_PATH",
    "ENV_TOKEN",
    "apply_env",
    "load_config",
    "load_config_or_default",
]

DEFAULT_API_URL = "https://api.expo.dev/graphql"
DEFAULT_API_TIMEOUT_SECONDS = 30
DEFAULT_WEBSITE_URL = "https://expo.dev"

ENV_API_URL = "OTA_API_URL"
ENV_TOKEN = "OTA_TOKEN"
ENV_CONFIG_PATH = "OTA_CONFIG"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ApiConfig:
    url: str = DEFAULT_API_URL
    timeout: int = DEFAULT_API_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class AuthConfig:
    token: str | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    website_url: str = DEFAULT_WEBSITE_URL

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        api: StrDict = get_table(data, "api") or {}
        auth: StrDict = get_table(data, "auth") or {}
        website: StrDict = get_table(data, "website") or {}

        timeout = get_int(api, "timeout")
        if timeout is not None and timeout <= 0:
            raise ValueError(f"api.timeout must be positive, got {timeout}")

        return cls(
            api=ApiConfig(
                url=get_str(api, "url") or DEFAULT_API_URL,
                timeout=timeout or DEFAULT_API_TIMEOUT_SECONDS,
            ),
            auth=AuthConfig(token=get_str(auth, "token")),
            website_url=(get_str(website, "url") or DEFAULT_WEBSITE_URL).rstrip("/"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the default Config.

    A file that exists but cannot be parsed is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)


def apply_env(config: Config, environ: Mapping[str, str] | None = None) -> Config:
    """Overlay OTA_API_URL and OTA_TOKEN onto a loaded config."""
    env = os.environ if environ is None else environ

    url = env.get(ENV_API_URL, "").strip()
    token = env.get(ENV_TOKEN, "").strip()

    if url:
        config = replace(config, api=replace(config.api, url=url))
    if token:
        config = replace(config, auth=AuthConfig(token=token))
    return config
