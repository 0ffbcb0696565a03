"""
Configuration constants for the Twitch chat feed

This module contains all configurable constants used throughout the application.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Attempts to parse the environment variable as a float. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# IRC endpoint
TWITCH_IRC_HOST = os.getenv("TWITCH_IRC_HOST", "irc.chat.twitch.tv")
TWITCH_IRC_PORT = _get_env_int("TWITCH_IRC_PORT", 6667)
TWITCH_IRC_CAPABILITIES = ("twitch.tv/tags", "twitch.tv/commands")

# Anonymous login: justinfan + random number in [min, max]
ANONYMOUS_NICK_PREFIX = "justinfan"
ANONYMOUS_NICK_MIN = 10000
ANONYMOUS_NICK_MAX = 99999

# Connection/read timing
ASYNC_IRC_CONNECT_TIMEOUT = _get_env_float(
    "ASYNC_IRC_CONNECT_TIMEOUT", 15.0
)  # Seconds allowed for the TCP connect
ASYNC_IRC_READ_TIMEOUT = _get_env_float(
    "ASYNC_IRC_READ_TIMEOUT", 60.0
)  # Max seconds one read may wait before the idle watchdog runs
ASYNC_IRC_READ_CHUNK = _get_env_int(
    "ASYNC_IRC_READ_CHUNK", 4096
)  # Bytes requested per socket read
SERVER_ACTIVITY_TIMEOUT = _get_env_int(
    "SERVER_ACTIVITY_TIMEOUT", 600
)  # Seconds of silence before the connection is treated as stale
PING_EXPECTED_INTERVAL = _get_env_int(
    "PING_EXPECTED_INTERVAL", 300
)  # Twitch sends PING roughly every 5 minutes

# Classification
EMOTE_ONLY_COVERAGE_RATIO = _get_env_float(
    "EMOTE_ONLY_COVERAGE_RATIO", 0.8
)  # Emote characters needed per non-whitespace character
EMOTE_CDN_URL = "https://static-cdn.jtvnw.net/emoticons/v2/{emote_id}/default/{theme}/{scale}"

# Reconnect policy (used by the runner, never inside the transport)
RECONNECT_MAX_ATTEMPTS = _get_env_int(
    "RECONNECT_MAX_ATTEMPTS", 0
)  # 0 = keep trying forever
RECONNECT_MAX_BACKOFF_SECONDS = _get_env_int(
    "RECONNECT_MAX_BACKOFF_SECONDS", 60
)  # Ceiling for the exponential backoff between attempts
