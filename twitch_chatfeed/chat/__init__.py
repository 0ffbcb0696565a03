"""Chat event model, classifier and delivery."""

from .classifier import classify
from .events import ChatEventBus, MessageHandler
from .models import ChatMessage, EmoteInfo, MessageType, UserNoticeType

__all__ = [
    "ChatEventBus",
    "ChatMessage",
    "EmoteInfo",
    "MessageHandler",
    "MessageType",
    "UserNoticeType",
    "classify",
]
