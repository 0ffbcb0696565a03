"""Read loop extracted from async_irc for clarity & testability."""

from __future__ import annotations

import asyncio
import codecs
import logging
from typing import TYPE_CHECKING

from ..constants import ASYNC_IRC_READ_CHUNK
from ..errors.internal import ChatConnectionError
from ..logs.logger import logger

if TYPE_CHECKING:  # pragma: no cover
    from .async_irc import AsyncTwitchChat


class IRCListener:
    """Owns the read loop and delegates line handling & staleness checks."""

    def __init__(self, client: AsyncTwitchChat):
        self.client = client
        self.buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    async def listen(self) -> None:
        if not self._can_start_listening():
            return
        self._initialize_listening()
        try:
            while self.client.running and self.client.reader is not None:
                should_break = await self._process_read_cycle()
                if should_break:
                    break
        finally:
            self._finalize_listening()

    def _can_start_listening(self) -> bool:
        if not self.client.connected or not self.client.reader:
            logger.log_event(
                "irc",
                "read_error",
                level=logging.ERROR,
                channel=self.client.channel,
                error="listener started without an open connection",
            )
            return False
        return True

    def _initialize_listening(self) -> None:
        self.buffer = ""
        self._decoder.reset()
        self.client.running = True
        self.client.heartbeat.record_activity()
        logger.log_event("irc", "listener_start", channel=self.client.channel)

    async def _process_read_cycle(self) -> bool:
        try:
            return await self._handle_data_read()
        except TimeoutError:
            return await self._handle_read_timeout()
        except ChatConnectionError as e:
            await self._fail(e)
            return True
        except OSError as e:
            logger.log_event(
                "irc",
                "read_error",
                level=logging.ERROR,
                channel=self.client.channel,
                error=str(e),
            )
            await self._fail(ChatConnectionError(f"read failed: {e}"))
            return True

    async def _handle_data_read(self) -> bool:
        reader = self.client.reader
        if reader is None:
            return True
        data = await asyncio.wait_for(
            reader.read(ASYNC_IRC_READ_CHUNK), timeout=self.client.read_timeout
        )
        if not data:
            if not self.client.running:
                # local disconnect closed the stream underneath us
                return True
            logger.log_event(
                "irc", "connection_lost", level=logging.ERROR, channel=self.client.channel
            )
            await self._fail(ChatConnectionError("connection closed by server"))
            return True
        self.buffer = await self.client.dispatcher.process_incoming_data(
            self.buffer, self._decoder.decode(data)
        )
        return False

    async def _handle_read_timeout(self) -> bool:
        if not self.client.heartbeat.is_connection_stale():
            return False
        logger.log_event(
            "irc",
            "connection_stale",
            level=logging.WARNING,
            channel=self.client.channel,
            time_since_activity=self.client.heartbeat.seconds_since_activity(),
        )
        await self._fail(ChatConnectionError("stale connection"))
        return True

    async def _fail(self, error: ChatConnectionError) -> None:
        self.client.failure = error
        await self.client.disconnect()

    def _finalize_listening(self) -> None:
        self.client.running = False
        logger.log_event(
            "irc", "listener_stopped", level=logging.DEBUG, channel=self.client.channel
        )
