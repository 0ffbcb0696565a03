"""Server activity tracking & idle watchdog (packaged)."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .async_irc import AsyncTwitchChat


class IRCHeartbeat:
    def __init__(self, client: AsyncTwitchChat):
        self.client = client

    def record_activity(self) -> None:
        self.client.last_server_activity = time.time()

    def record_ping(self) -> None:
        now = time.time()
        self.client.last_ping_from_server = now
        self.client.last_server_activity = now

    def seconds_since_activity(self) -> float:
        if self.client.last_server_activity <= 0:
            return 0.0
        return time.time() - self.client.last_server_activity

    def is_connection_stale(self) -> bool:
        """True once the server has been silent past its activity timeout.

        Twitch pings roughly every five minutes, so any healthy connection
        produces traffic well inside the timeout.
        """
        time_since_activity = self.seconds_since_activity()
        if time_since_activity > self.client.server_activity_timeout * 0.5:
            logger.log_event(
                "irc",
                "stale_early_warning",
                level=logging.DEBUG,
                channel=self.client.channel,
                time_since_activity=time_since_activity,
            )
        return time_since_activity > self.client.server_activity_timeout
