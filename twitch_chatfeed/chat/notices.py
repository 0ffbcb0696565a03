"""USERNOTICE tag interpretation (subs, raids, ...)."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .models import UserNoticeType

NOTICE_TYPES = {
    "sub": UserNoticeType.SUB,
    "resub": UserNoticeType.RESUB,
    "subgift": UserNoticeType.SUB_GIFT,
    "raid": UserNoticeType.RAID,
    "bitsbadgetier": UserNoticeType.BITS_BADGE_TIER,
}


@dataclass(frozen=True, slots=True)
class NoticeDetails:
    notice_type: UserNoticeType = UserNoticeType.OTHER
    system_message: str = ""
    sub_months: int = 0
    raid_from: str = ""
    raid_viewers: int = 0


def unescape_system_message(value: str) -> str:
    return value.replace("\\s", " ")


def _int_param(tags: Mapping[str, str], key: str) -> int:
    try:
        return int(tags.get(key, ""))
    except ValueError:
        return 0


def parse_notice(tags: Mapping[str, str]) -> NoticeDetails:
    """Derive notice details from ``msg-id``, ``msg-param-*`` and ``system-msg``.

    Unknown or missing ``msg-id`` values map to ``UserNoticeType.OTHER``;
    numeric parameters that do not parse are left at 0.
    """
    notice_type = NOTICE_TYPES.get(tags.get("msg-id", ""), UserNoticeType.OTHER)
    sub_months = 0
    raid_from = ""
    raid_viewers = 0
    if notice_type is UserNoticeType.RESUB:
        sub_months = _int_param(tags, "msg-param-cumulative-months")
    elif notice_type is UserNoticeType.RAID:
        raid_from = tags.get("msg-param-displayName", "")
        raid_viewers = _int_param(tags, "msg-param-viewerCount")
    return NoticeDetails(
        notice_type=notice_type,
        system_message=unescape_system_message(tags.get("system-msg", "")),
        sub_months=sub_months,
        raid_from=raid_from,
        raid_viewers=raid_viewers,
    )
