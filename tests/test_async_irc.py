"""Transport tests against a loopback IRC server."""

from __future__ import annotations

import asyncio
import re
import socket

import pytest

from twitch_chatfeed.chat.models import ChatMessage, MessageType
from twitch_chatfeed.config.model import ChatFeedConfig
from twitch_chatfeed.errors.internal import ChatConnectionError
from twitch_chatfeed.irc.async_irc import AsyncTwitchChat
from twitch_chatfeed.irc.models import ConnectionState


def _unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.mark.asyncio
async def test_handshake_order(twitch_server):
    chat = AsyncTwitchChat()
    await chat.connect("127.0.0.1", twitch_server.port, "#SomeChannel")
    try:
        lines = await twitch_server.wait_for_lines(3)
        assert lines[0] == "CAP REQ :twitch.tv/tags twitch.tv/commands"
        assert re.fullmatch(r"NICK justinfan\d{5}", lines[1])
        assert lines[2] == "JOIN #somechannel"
        assert chat.channel == "somechannel"
        assert chat.state is ConnectionState.JOINING
        assert chat.connected is True
        assert chat.reached_ready is False
    finally:
        await chat.disconnect()


@pytest.mark.asyncio
async def test_nick_is_randomized_within_range(twitch_server):
    chat = AsyncTwitchChat()
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await chat.disconnect()
    assert chat.nick is not None
    assert 10000 <= int(chat.nick.removeprefix("justinfan")) <= 99999


@pytest.mark.asyncio
async def test_messages_are_published_in_order(twitch_server):
    chat = AsyncTwitchChat()
    received: list[ChatMessage] = []
    chat.subscribe(received.append)
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.send(
        ":a!a@a PRIVMSG #chan :first\r\n"
        "@emotes=25:0-4 :b!b@b PRIVMSG #chan :Kappa\r\n"
        ":c!c@c PRIVMSG #chan :third\r\n"
    )
    await _wait_until(lambda: len(received) == 3)
    await chat.disconnect()
    assert [m.username for m in received] == ["a", "b", "c"]
    assert received[1].type is MessageType.EMOTE_ONLY


@pytest.mark.asyncio
async def test_ping_from_server_gets_pong(twitch_server):
    chat = AsyncTwitchChat()
    received: list[ChatMessage] = []
    chat.subscribe(received.append)
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.wait_for_lines(3)
    await twitch_server.send("PING :tmi.twitch.tv\r\n")
    lines = await twitch_server.wait_for_lines(4)
    await chat.disconnect()
    assert lines[3] == "PONG :tmi.twitch.tv"
    assert lines.count("PONG :tmi.twitch.tv") == 1
    assert received == []


@pytest.mark.asyncio
async def test_multibyte_character_split_across_reads(twitch_server):
    chat = AsyncTwitchChat()
    received: list[ChatMessage] = []
    chat.subscribe(received.append)
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    data = ":a!a@a PRIVMSG #chan :héllo 🎉\r\n".encode()
    cut = data.index("🎉".encode()) + 2
    await twitch_server.send(data[:cut])
    await asyncio.sleep(0.05)
    await twitch_server.send(data[cut:])
    await _wait_until(lambda: len(received) == 1)
    await chat.disconnect()
    assert received[0].message == "héllo 🎉"


@pytest.mark.asyncio
async def test_stream_subscriber(twitch_server):
    chat = AsyncTwitchChat()
    stream = chat.events.stream()
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.send(":a!a@a PRIVMSG #chan :hi\r\n")
    message = await asyncio.wait_for(anext(stream), timeout=2)
    await chat.disconnect()
    chat.events.close()
    assert message.message == "hi"


@pytest.mark.asyncio
async def test_connect_refused_raises_connection_error():
    chat = AsyncTwitchChat()
    with pytest.raises(ChatConnectionError) as exc:
        await chat.connect("127.0.0.1", _unused_port(), "chan")
    assert isinstance(exc.value, ConnectionError)
    assert chat.connected is False
    assert chat.writer is None
    assert chat.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connect_timeout_raises_connection_error(monkeypatch):
    async def never_connects(*args, **kwargs):
        await asyncio.sleep(10)

    monkeypatch.setattr(asyncio, "open_connection", never_connects)
    chat = AsyncTwitchChat(connect_timeout=0.05)
    with pytest.raises(ChatConnectionError):
        await chat.connect("127.0.0.1", 6667, "chan")
    assert chat.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_is_idempotent_and_unblocks_reader(twitch_server):
    chat = AsyncTwitchChat()
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.wait_for_lines(3)
    assert chat.running is True
    await asyncio.wait_for(chat.disconnect(), timeout=2)
    await chat.disconnect()
    await asyncio.wait_for(chat.wait_closed(), timeout=2)
    assert chat.running is False
    assert chat.reader is None
    assert chat.writer is None
    assert chat.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_before_connect_is_noop():
    chat = AsyncTwitchChat()
    await chat.disconnect()
    await chat.wait_closed()
    assert chat.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_server_close_surfaces_from_wait_closed(twitch_server):
    chat = AsyncTwitchChat()
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.wait_for_lines(3)
    await twitch_server.drop()
    with pytest.raises(ChatConnectionError):
        await asyncio.wait_for(chat.wait_closed(), timeout=2)
    assert chat.connected is False
    assert chat.writer is None


@pytest.mark.asyncio
async def test_stale_connection_ends_loop(twitch_server):
    chat = AsyncTwitchChat(read_timeout=0.05, server_activity_timeout=0.1)
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    with pytest.raises(ChatConnectionError, match="stale"):
        await asyncio.wait_for(chat.wait_closed(), timeout=2)
    assert chat.state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_reconnect_on_same_instance(twitch_server):
    chat = AsyncTwitchChat()
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.wait_for_lines(3)
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    lines = await twitch_server.wait_for_lines(6)
    await chat.disconnect()
    assert twitch_server.connections == 2
    assert lines[5] == "JOIN #chan"


def test_from_config_uses_config_values():
    config = ChatFeedConfig(
        channel="chan",
        capabilities=("twitch.tv/tags",),
        nick_prefix="lurker",
        read_timeout=5,
        server_activity_timeout=30,
    )
    chat = AsyncTwitchChat.from_config(config)
    assert chat.capabilities == ("twitch.tv/tags",)
    assert chat.nick_prefix == "lurker"
    assert chat.read_timeout == 5
    assert chat.server_activity_timeout == 30


@pytest.mark.asyncio
async def test_subscriber_disconnect_drops_rest_of_chunk(twitch_server):
    chat = AsyncTwitchChat()
    received: list[str] = []

    async def stop_after_first(message: ChatMessage) -> None:
        received.append(message.username)
        await chat.disconnect()

    chat.subscribe(stop_after_first)
    await chat.connect("127.0.0.1", twitch_server.port, "chan")
    await twitch_server.wait_for_lines(3)
    await twitch_server.send(
        ":a!a@a PRIVMSG #chan :one\r\n"
        ":b!b@b PRIVMSG #chan :two\r\n"
        "PING :tmi.twitch.tv\r\n"
    )
    await asyncio.wait_for(chat.wait_closed(), timeout=2)
    assert received == ["a"]
    assert chat.failure is None
    assert chat.state is ConnectionState.DISCONNECTED
