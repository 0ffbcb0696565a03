from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    ANONYMOUS_NICK_PREFIX,
    ASYNC_IRC_CONNECT_TIMEOUT,
    ASYNC_IRC_READ_TIMEOUT,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_MAX_BACKOFF_SECONDS,
    SERVER_ACTIVITY_TIMEOUT,
    TWITCH_IRC_CAPABILITIES,
    TWITCH_IRC_HOST,
    TWITCH_IRC_PORT,
)


def normalize_channel(channel: str) -> str:
    """Strip whitespace and a leading '#', then case-fold."""
    return channel.strip().lstrip("#").lower()


class ChatFeedConfig(BaseModel):
    """Connection settings for one anonymous chat feed.

    Attributes:
        channel: Channel to join, stored without '#' and lowercased.
        host: IRC server host name.
        port: IRC server port.
        capabilities: Capability names sent in the ``CAP REQ`` line.
        nick_prefix: Prefix of the randomized anonymous nick.
        connect_timeout: Seconds allowed for opening the socket.
        read_timeout: Seconds a single read may wait before the idle check runs.
        server_activity_timeout: Seconds of silence after which the connection is stale.
        reconnect_max_attempts: Attempts the runner makes before giving up (0 = unlimited).
        reconnect_max_backoff: Upper bound in seconds for the runner's backoff.
    """

    channel: str = Field(min_length=1, max_length=25)
    host: str = Field(default=TWITCH_IRC_HOST, min_length=1)
    port: int = Field(default=TWITCH_IRC_PORT, ge=1, le=65535)
    capabilities: tuple[str, ...] = TWITCH_IRC_CAPABILITIES
    nick_prefix: str = Field(default=ANONYMOUS_NICK_PREFIX, min_length=1)
    connect_timeout: float = Field(default=ASYNC_IRC_CONNECT_TIMEOUT, gt=0)
    read_timeout: float = Field(default=ASYNC_IRC_READ_TIMEOUT, gt=0)
    server_activity_timeout: float = Field(default=SERVER_ACTIVITY_TIMEOUT, gt=0)
    reconnect_max_attempts: int = Field(default=RECONNECT_MAX_ATTEMPTS, ge=0)
    reconnect_max_backoff: float = Field(default=RECONNECT_MAX_BACKOFF_SECONDS, gt=0)

    @field_validator("channel", mode="before")
    @classmethod
    def validate_channel(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("channel must be a string")
        channel = normalize_channel(v)
        if not channel or " " in channel:
            raise ValueError("channel must be a single non-empty name")
        return channel

    @field_validator("capabilities", mode="before")
    @classmethod
    def validate_capabilities(cls, v: Any) -> tuple[str, ...]:
        if isinstance(v, str):
            v = v.replace(",", " ").split()
        if not isinstance(v, list | tuple):
            raise ValueError("capabilities must be a list of names")
        return tuple(str(c).strip() for c in v if str(c).strip())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChatFeedConfig:
        return cls.model_validate(dict(data))

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump()
        data["capabilities"] = list(self.capabilities)
        return data
