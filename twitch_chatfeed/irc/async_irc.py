"""Anonymous asyncio Twitch chat transport."""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Callable, Iterable
from typing import Any

from ..chat.events import ChatEventBus, MessageHandler
from ..config.model import ChatFeedConfig, normalize_channel
from ..constants import (
    ANONYMOUS_NICK_MAX,
    ANONYMOUS_NICK_MIN,
    ANONYMOUS_NICK_PREFIX,
    ASYNC_IRC_CONNECT_TIMEOUT,
    ASYNC_IRC_READ_TIMEOUT,
    PING_EXPECTED_INTERVAL,
    SERVER_ACTIVITY_TIMEOUT,
    TWITCH_IRC_CAPABILITIES,
)
from ..errors.internal import ChatConnectionError
from ..logs.logger import logger
from .dispatcher import IRCDispatcher
from .health import IRCHealthMonitor
from .heartbeat import IRCHeartbeat
from .listener import IRCListener
from .models import ConnectionState


class AsyncTwitchChat:  # pylint: disable=too-many-instance-attributes
    """Read-only connection to one channel's chat.

    ``connect`` performs the anonymous handshake and starts the read loop as
    a task owned by this instance; classified messages are published on
    :attr:`events`. Failures are raised to the caller and never retried here.
    """

    def __init__(
        self,
        *,
        capabilities: Iterable[str] = TWITCH_IRC_CAPABILITIES,
        nick_prefix: str = ANONYMOUS_NICK_PREFIX,
        connect_timeout: float = ASYNC_IRC_CONNECT_TIMEOUT,
        read_timeout: float = ASYNC_IRC_READ_TIMEOUT,
        server_activity_timeout: float = SERVER_ACTIVITY_TIMEOUT,
        events: ChatEventBus | None = None,
    ):
        self.capabilities = tuple(capabilities)
        self.nick_prefix = nick_prefix
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.host: str | None = None
        self.port: int | None = None
        self.channel: str | None = None
        self.nick: str | None = None
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.running = False
        self.connected = False
        self.state = ConnectionState.DISCONNECTED
        self.confirmed_channels: set[str] = set()
        self.last_server_activity = 0.0
        self.server_activity_timeout = server_activity_timeout
        self.last_ping_from_server = 0.0
        self.expected_ping_interval = PING_EXPECTED_INTERVAL
        self.lines_received = 0
        # True once the current session has confirmed its join.
        self.reached_ready = False
        self.failure: ChatConnectionError | None = None
        self.events = events if events is not None else ChatEventBus()
        self._listen_task: asyncio.Task[None] | None = None
        self.health_monitor = IRCHealthMonitor(self)
        self.dispatcher = IRCDispatcher(self)
        self.heartbeat = IRCHeartbeat(self)
        self.listener = IRCListener(self)

    @classmethod
    def from_config(
        cls, config: ChatFeedConfig, events: ChatEventBus | None = None
    ) -> AsyncTwitchChat:
        return cls(
            capabilities=config.capabilities,
            nick_prefix=config.nick_prefix,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            server_activity_timeout=config.server_activity_timeout,
            events=events,
        )

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                channel=self.channel,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state
        if new_state is ConnectionState.READY:
            self.reached_ready = True

    def _anonymous_nick(self) -> str:
        number = secrets.SystemRandom().randint(ANONYMOUS_NICK_MIN, ANONYMOUS_NICK_MAX)
        return f"{self.nick_prefix}{number}"

    async def connect(self, host: str, port: int, channel: str) -> None:
        """Open the socket, send the handshake and start reading.

        Raises:
            ChatConnectionError: the socket could not be opened in time or the
                handshake could not be written. The instance is disconnected.
        """
        if self.writer is not None or self._listen_task is not None:
            await self.disconnect()
        self.host = host
        self.port = port
        self.channel = normalize_channel(channel)
        self.nick = self._anonymous_nick()
        self.failure = None
        self.reached_ready = False
        self._set_state(ConnectionState.CONNECTING)
        logger.log_event(
            "irc", "connect_start", channel=self.channel, server=host, port=port
        )
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(host, port), timeout=self.connect_timeout
            )
        except TimeoutError as e:
            logger.log_event(
                "irc",
                "connect_timeout",
                level=logging.ERROR,
                channel=self.channel,
                server=host,
                port=port,
                timeout=self.connect_timeout,
            )
            await self.disconnect()
            raise ChatConnectionError(
                f"timed out connecting to {host}:{port}",
                data={"host": host, "port": port},
            ) from e
        except OSError as e:
            logger.log_event(
                "irc",
                "connect_network_error",
                level=logging.ERROR,
                channel=self.channel,
                server=host,
                port=port,
                error=str(e),
            )
            await self.disconnect()
            raise ChatConnectionError(
                f"could not connect to {host}:{port}: {e}",
                data={"host": host, "port": port},
            ) from e

        self.connected = True
        self.running = True
        try:
            await self._send_handshake()
        except ChatConnectionError:
            await self.disconnect()
            raise
        self._set_state(ConnectionState.JOINING)
        logger.log_event("irc", "connect_success", channel=self.channel, nick=self.nick)
        self._listen_task = asyncio.create_task(
            self.listen(), name=f"chatfeed-listener-{self.channel}"
        )

    async def _send_handshake(self) -> None:
        if self.capabilities:
            await self._send_line(f"CAP REQ :{' '.join(self.capabilities)}")
        await self._send_line(f"NICK {self.nick}")
        await self._send_line(f"JOIN #{self.channel}")
        logger.log_event(
            "irc",
            "handshake_sent",
            level=logging.DEBUG,
            channel=self.channel,
            capabilities=" ".join(self.capabilities) or "none",
        )

    async def _send_line(self, message: str) -> None:
        writer = self.writer
        if writer is None:
            raise ChatConnectionError("not connected", data={"line": message})
        try:
            writer.write(f"{message}\r\n".encode())
            await writer.drain()
        except OSError as e:
            logger.log_event(
                "irc",
                "send_failed",
                level=logging.ERROR,
                channel=self.channel,
                error=str(e),
            )
            raise ChatConnectionError(f"send failed: {e}") from e

    async def listen(self) -> None:
        await self.listener.listen()

    async def disconnect(self) -> None:
        """Close the socket and stop the read loop. Safe to call repeatedly."""
        was_active = self.writer is not None or self.running
        self.running = False
        self.connected = False
        writer = self.writer
        self.writer = None
        self.reader = None
        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.log_event(
                    "irc",
                    "read_error",
                    level=logging.DEBUG,
                    channel=self.channel,
                    error=str(e),
                )
        task = self._listen_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            await asyncio.wait({task})
        self.confirmed_channels.clear()
        self._set_state(ConnectionState.DISCONNECTED)
        if was_active:
            logger.log_event("irc", "disconnected", channel=self.channel)

    async def wait_closed(self) -> None:
        """Wait for the read loop to end.

        Raises:
            ChatConnectionError: the loop ended because the connection failed.
        """
        task = self._listen_task
        if task is not None:
            await asyncio.wait({task})
        if self.failure is not None:
            raise self.failure

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        return self.events.subscribe(handler)

    def is_healthy(self) -> bool:
        return self.health_monitor.is_healthy()

    def get_health_snapshot(self) -> dict[str, Any]:
        return self.health_monitor.get_health_snapshot()
