"""IRC transport package.

Contains the anonymous chat transport plus its listener, dispatcher,
heartbeat, health and parsing helpers.
"""

from .async_irc import AsyncTwitchChat  # noqa: F401
from .dispatcher import IRCDispatcher  # noqa: F401
from .health import IRCHealthMonitor  # noqa: F401
from .heartbeat import IRCHeartbeat  # noqa: F401
from .listener import IRCListener  # noqa: F401
from .models import ConnectionState  # noqa: F401
from .parser import IRCMessage, parse_irc_message  # noqa: F401

__all__ = [
    "AsyncTwitchChat",
    "ConnectionState",
    "IRCDispatcher",
    "IRCHealthMonitor",
    "IRCHeartbeat",
    "IRCListener",
    "IRCMessage",
    "parse_irc_message",
]
