"""Configuration loading for relaybot.

All user-editable settings (bot token, backend location, logging) live in a
single TOML file, config.toml by default, selectable with --config.
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, field
from typing import Any, Optional

from core.config import DEFAULT_REQUEST_TIMEOUT, RelayConfig

DEFAULT_CONFIG_PATH = "config.toml"

_BOT_TOKEN_RE = re.compile(r"(\d+):[A-Za-z0-9_-]+")


class ConfigLoadError(RuntimeError):
    """The config file is missing, malformed or incomplete."""


@dataclass(frozen=True)
class Settings:
    relay: RelayConfig
    logging: dict[str, Any] = field(default_factory=dict)


def parse_bot_id(token: str) -> int:
    """Return the numeric bot id encoded in a bot token."""

    match = _BOT_TOKEN_RE.fullmatch(token.strip())
    if match is None:
        raise ConfigLoadError("token is not a valid bot token")
    return int(match.group(1))


def _read_toml(path: str) -> dict[str, Any]:
    try:
        with open(path, "rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as e:
        raise ConfigLoadError(f"Config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigLoadError(f"Config file {path} is not valid TOML: {e}") from e
    except OSError as e:
        raise ConfigLoadError(f"Config file {path} cannot be read: {e}") from e


def _string(raw: dict[str, Any], key: str, required: bool = False) -> Optional[str]:
    value = raw.get(key)
    if value is None or value == "":
        if required:
            raise ConfigLoadError(f"Missing required config key: {key}")
        return None
    if not isinstance(value, str):
        raise ConfigLoadError(f"Config key {key} must be a string")
    return value


def _timeout(raw: dict[str, Any]) -> float:
    value = raw.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigLoadError("request_timeout must be a positive number of seconds")
    return float(value)


def build_settings(raw: dict[str, Any]) -> Settings:
    """Validate a parsed config document and build the runtime settings."""

    token = _string(raw, "token", required=True)
    parse_bot_id(token)

    root_url = _string(raw, "root_url", required=True)
    if not root_url.startswith(("http://", "https://")):
        raise ConfigLoadError("root_url must start with http:// or https://")

    logging_config = raw.get("logging", {})
    if not isinstance(logging_config, dict):
        raise ConfigLoadError("[logging] must be a table")

    relay = RelayConfig(
        bot_token=token,
        root_url=root_url,
        # The backend path token defaults to the bot token itself.
        backend_token=_string(raw, "backend_token") or token,
        dashboard_url=_string(raw, "cobalt_root_url"),
        start_secret=_string(raw, "start_secret"),
        request_timeout=_timeout(raw),
    )
    return Settings(relay=relay, logging=logging_config)


def load_settings(path: str = DEFAULT_CONFIG_PATH) -> Settings:
    return build_settings(_read_toml(path))
