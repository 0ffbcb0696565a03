"""Typed chat events produced by the classifier."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from ..constants import EMOTE_CDN_URL


class MessageType(str, Enum):
    REGULAR_CHAT = "regular_chat"
    EMOTE_ONLY = "emote_only"
    BITS_CHEER = "bits_cheer"
    USER_NOTICE = "user_notice"
    # Never produced by the classifier; available to collaborators for
    # locally generated announcements.
    SYSTEM = "system"


class UserNoticeType(str, Enum):
    SUB = "sub"
    RESUB = "resub"
    SUB_GIFT = "subgift"
    RAID = "raid"
    BITS_BADGE_TIER = "bitsbadgetier"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class EmoteInfo:
    """One emote occurrence inside a chat message.

    ``start_index`` and ``end_index`` are inclusive character offsets into
    the message body. ``emote_name`` is empty when the offsets fall outside
    the body.
    """

    emote_id: str
    emote_name: str
    start_index: int
    end_index: int

    @property
    def length(self) -> int:
        return self.end_index - self.start_index + 1

    def image_url(self, scale: str = "2.0", theme: str = "dark") -> str:
        """CDN URL of the emote image (scale 1.0, 2.0 or 3.0)."""
        return EMOTE_CDN_URL.format(emote_id=self.emote_id, theme=theme, scale=scale)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """Immutable chat event, one per classified IRC line.

    Badge flags are independent; a user may hold several. Notice fields are
    only meaningful when the message came from a ``USERNOTICE`` line, in which
    case ``notice_type`` is never ``None``. ``timestamp`` records when the line
    was classified and takes no part in equality.
    """

    type: MessageType
    username: str
    message: str = ""
    timestamp: datetime = field(default_factory=_utcnow, compare=False)
    channel: str = ""
    display_name: str = ""

    is_subscriber: bool = False
    is_moderator: bool = False
    is_vip: bool = False
    is_broadcaster: bool = False
    badges: tuple[str, ...] = ()

    has_emotes: bool = False
    emotes: tuple[EmoteInfo, ...] = ()

    has_bits: bool = False
    bits_amount: int = 0

    notice_type: UserNoticeType | None = None
    system_message: str = ""
    sub_months: int = 0
    raid_from: str = ""
    raid_viewers: int = 0

    @property
    def is_notice(self) -> bool:
        return self.notice_type is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "username": self.username,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "channel": self.channel,
            "display_name": self.display_name,
            "is_subscriber": self.is_subscriber,
            "is_moderator": self.is_moderator,
            "is_vip": self.is_vip,
            "is_broadcaster": self.is_broadcaster,
            "badges": list(self.badges),
            "has_emotes": self.has_emotes,
            "emotes": [
                {
                    "emote_id": e.emote_id,
                    "emote_name": e.emote_name,
                    "start_index": e.start_index,
                    "end_index": e.end_index,
                }
                for e in self.emotes
            ],
            "has_bits": self.has_bits,
            "bits_amount": self.bits_amount,
            "notice_type": self.notice_type.value if self.notice_type else None,
            "system_message": self.system_message,
            "sub_months": self.sub_months,
            "raid_from": self.raid_from,
            "raid_viewers": self.raid_viewers,
        }
