"""Anonymous Twitch chat ingestion and message classification."""

from .chat import (
    ChatEventBus,
    ChatMessage,
    EmoteInfo,
    MessageType,
    UserNoticeType,
    classify,
)
from .errors.internal import ChatConnectionError
from .irc import AsyncTwitchChat, ConnectionState

__all__ = [
    "AsyncTwitchChat",
    "ChatConnectionError",
    "ChatEventBus",
    "ChatMessage",
    "ConnectionState",
    "EmoteInfo",
    "MessageType",
    "UserNoticeType",
    "classify",
]
