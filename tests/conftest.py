import asyncio
import logging

import pytest
import pytest_asyncio

from twitch_chatfeed.logging_config import error_aggregator


class FakeTwitchServer:
    """Loopback IRC endpoint that records client lines and pushes server lines."""

    def __init__(self) -> None:
        self.server: asyncio.AbstractServer | None = None
        self.lines: list[str] = []
        self.writer: asyncio.StreamWriter | None = None
        self.writers: list[asyncio.StreamWriter] = []
        self.connections = 0
        self.connected = asyncio.Event()
        self._line_added = asyncio.Event()

    @property
    def port(self) -> int:
        assert self.server is not None
        return self.server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self.server = await asyncio.start_server(self._on_client, "127.0.0.1", 0)

    async def _on_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        self.writer = writer
        self.writers.append(writer)
        self.connections += 1
        self.connected.set()
        try:
            while line := await reader.readline():
                self.lines.append(line.decode("utf-8").rstrip("\r\n"))
                self._line_added.set()
        except ConnectionError:
            pass

    async def wait_for_lines(self, count: int, timeout: float = 2.0) -> list[str]:
        async def _wait() -> None:
            while len(self.lines) < count:
                self._line_added.clear()
                await self._line_added.wait()

        await asyncio.wait_for(_wait(), timeout=timeout)
        return self.lines

    async def send(self, data: str | bytes) -> None:
        await asyncio.wait_for(self.connected.wait(), timeout=2.0)
        assert self.writer is not None
        self.writer.write(data.encode("utf-8") if isinstance(data, str) else data)
        await self.writer.drain()

    async def drop(self) -> None:
        await asyncio.wait_for(self.connected.wait(), timeout=2.0)
        assert self.writer is not None
        self.writer.close()

    async def close(self) -> None:
        for writer in self.writers:
            writer.close()
        if self.server is not None:
            self.server.close()
            await self.server.wait_closed()


@pytest_asyncio.fixture
async def twitch_server():
    server = FakeTwitchServer()
    await server.start()
    yield server
    await server.close()


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    error_aggregator.clear()
    yield
    error_aggregator.clear()


@pytest.fixture
def chat_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="twitch_chatfeed")
    return caplog
