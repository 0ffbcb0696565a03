"""Health snapshot of a chat transport (packaged)."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .async_irc import AsyncTwitchChat

# Fraction of the activity timeout after which a quiet connection is flagged.
IDLE_WARNING_FRACTION = 0.5
# Missed-PING tolerance as a multiple of the expected interval.
PING_GRACE_FACTOR = 1.5


class IRCHealthMonitor:
    """Derives ``healthy`` plus a list of reasons from transport bookkeeping.

    Reasons: ``not_connected``, ``not_running``, ``missing_streams``,
    ``idle_warning``, ``stale_activity``, ``ping_timeout``,
    ``join_unconfirmed``.
    """

    def __init__(self, chat: AsyncTwitchChat) -> None:
        self.chat = chat

    def is_healthy(self) -> bool:
        return not self.reasons(time.time())

    def reasons(self, now: float) -> list[str]:
        chat = self.chat
        found: list[str] = []
        if not chat.connected:
            found.append("not_connected")
        if not chat.running:
            found.append("not_running")
        if chat.reader is None or chat.writer is None:
            found.append("missing_streams")
        idle = _age(chat.last_server_activity, now)
        if idle is not None:
            if idle > chat.server_activity_timeout * IDLE_WARNING_FRACTION:
                found.append("idle_warning")
            if idle > chat.server_activity_timeout:
                found.append("stale_activity")
        since_ping = _age(chat.last_ping_from_server, now)
        if since_ping is not None and since_ping > chat.expected_ping_interval * PING_GRACE_FACTOR:
            found.append("ping_timeout")
        if chat.channel and chat.channel not in chat.confirmed_channels:
            found.append("join_unconfirmed")
        return found

    def get_health_snapshot(self) -> dict[str, Any]:
        chat = self.chat
        now = time.time()
        reasons = self.reasons(now)
        return {
            "channel": chat.channel,
            "nick": chat.nick,
            "state": chat.state.name,
            "healthy": not reasons,
            "reasons": reasons,
            "connected": chat.connected,
            "running": chat.running,
            "time_since_activity": _age(chat.last_server_activity, now),
            "time_since_ping": _age(chat.last_ping_from_server, now),
            "lines_received": chat.lines_received,
            "events_published": chat.events.published,
            "subscribers": chat.events.subscriber_count,
        }


def _age(timestamp: float, now: float) -> float | None:
    return now - timestamp if timestamp > 0 else None
