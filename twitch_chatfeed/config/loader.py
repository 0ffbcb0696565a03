"""Configuration loading utilities."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..errors.internal import InternalError
from .model import ChatFeedConfig

DEFAULT_CONFIG_FILE = "twitch_chatfeed.conf"

# Environment variable -> config field
_ENV_OVERRIDES = {
    "TWITCH_CHANNEL": "channel",
    "TWITCH_IRC_HOST": "host",
    "TWITCH_IRC_PORT": "port",
    "TWITCH_IRC_CAPABILITIES": "capabilities",
}


class ConfigError(InternalError):
    """Raised when no valid configuration can be assembled."""


def load_raw_config(config_file: str | Path) -> dict[str, Any]:
    """Read the JSON config file; a missing file yields an empty mapping."""
    path = Path(config_file)
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{path} must contain a JSON object")
    return dict(raw)


def apply_env_overrides(
    data: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> dict[str, Any]:
    env = os.environ if environ is None else environ
    merged = dict(data)
    for var, field in _ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            merged[field] = value
    return merged


def load_config(
    config_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ChatFeedConfig:
    """Build the feed configuration from file and environment.

    The file named by ``TWITCH_CHATFEED_CONF`` (default
    ``twitch_chatfeed.conf``) is read first; ``TWITCH_CHANNEL``,
    ``TWITCH_IRC_HOST``, ``TWITCH_IRC_PORT`` and ``TWITCH_IRC_CAPABILITIES``
    override its values.

    Raises:
        ConfigError: If the file is unreadable or validation fails.
    """
    env = os.environ if environ is None else environ
    path = config_file or env.get("TWITCH_CHATFEED_CONF", DEFAULT_CONFIG_FILE)
    data = apply_env_overrides(load_raw_config(path), env)
    try:
        return ChatFeedConfig.from_dict(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigError(problems, data={"config_file": str(path)}) from e
