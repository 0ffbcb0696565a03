"""Line framing, keepalive and chat dispatch (packaged)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..chat.classifier import classify
from ..chat.models import ChatMessage
from ..logs.logger import logger
from .models import ConnectionState
from .parser import parse_irc_message

if TYPE_CHECKING:  # pragma: no cover
    from .async_irc import AsyncTwitchChat


class IRCDispatcher:
    def __init__(self, client: AsyncTwitchChat):
        self.client = client

    async def process_incoming_data(self, buffer: str, new_data: str) -> str:
        """Append ``new_data`` and dispatch every complete line.

        Returns the unterminated remainder to carry into the next read.
        """
        buffer += new_data
        self.client.heartbeat.record_activity()
        while self.client.running and "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            line = line.rstrip("\r")
            if line.strip():
                await self.handle_line(line)
        return buffer

    async def handle_line(self, raw_line: str) -> ChatMessage | None:
        # Lines left in the chunk after a deliberate disconnect are dropped.
        if not self.client.running:
            return None
        self.client.lines_received += 1
        if raw_line.startswith("PING"):
            await self._handle_ping(raw_line)
            return None

        logger.log_event(
            "irc", "raw", level=logging.DEBUG, channel=self.client.channel, raw=raw_line
        )
        parsed = parse_irc_message(raw_line)
        if parsed.command in ("366", "RPL_ENDOFNAMES"):
            self._handle_channel_confirmation(parsed.params)
            return None

        message = classify(raw_line)
        if message is None:
            return None
        await self.client.events.publish(message)
        return message

    async def _handle_ping(self, raw_line: str) -> None:
        await self.client._send_line(raw_line.replace("PING", "PONG", 1))  # noqa: SLF001
        self.client.heartbeat.record_ping()
        logger.log_event("irc", "ping", level=logging.DEBUG, channel=self.client.channel)

    def _handle_channel_confirmation(self, params: str) -> None:
        if " #" not in params:
            return
        channel = params.split(" #")[1].split()[0].lower()
        self.client.confirmed_channels.add(channel)
        logger.log_event("irc", "join_confirmed", channel=channel)
        if channel == self.client.channel:
            self.client._set_state(ConnectionState.READY)  # noqa: SLF001
