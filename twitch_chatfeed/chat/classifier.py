"""Turn raw Twitch IRC lines into typed :class:`ChatMessage` events.

Classification is a pure function of the line (plus the capture time). The
only side effect is logging: a line that cannot be classified is logged as a
parse warning and yields ``None``; a tag that breaks its own grammar is
logged and ignored while the rest of the line is still classified.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from ..constants import EMOTE_ONLY_COVERAGE_RATIO
from ..errors.internal import MalformedTagWarning, ParseWarning
from ..logs.logger import logger
from .badges import parse_badges
from .emotes import is_emote_only, parse_emotes
from .models import ChatMessage, MessageType
from .notices import parse_notice
from .tags import channel_from_params, split_tags

PRIVMSG = "PRIVMSG"
USERNOTICE = "USERNOTICE"


def classify(
    raw_line: str,
    *,
    now: datetime | None = None,
    emote_only_ratio: float = EMOTE_ONLY_COVERAGE_RATIO,
) -> ChatMessage | None:
    """Classify one IRC line.

    Returns ``None`` for lines that are neither ``PRIVMSG`` nor
    ``USERNOTICE``, for lines without a username, and for lines that fail to
    parse. Never raises for bad input.
    """
    try:
        return _classify(raw_line, now or datetime.now(UTC), emote_only_ratio)
    except Exception as e:  # noqa: BLE001
        logger.log_event(
            "chat",
            "parse_warning",
            level=logging.WARNING,
            raw=raw_line,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


def _classify(
    raw_line: str, now: datetime, emote_only_ratio: float
) -> ChatMessage | None:
    tags, line = split_tags(raw_line.rstrip("\r\n"))
    command = _detect_command(line)
    if command == PRIVMSG:
        fields = _privmsg_fields(line)
    elif command == USERNOTICE:
        fields = _usernotice_fields(line, tags)
    else:
        return None
    if not fields["username"]:
        return None

    fields["timestamp"] = now
    fields["display_name"] = tags.get("display-name", "")
    _apply_badges(fields, tags)
    _apply_emotes(fields, tags, emote_only_ratio)
    _apply_bits(fields, tags)
    return ChatMessage(**fields)


def _detect_command(line: str) -> str | None:
    # Chat text may itself contain the other keyword; the earlier one is the command.
    positions = [
        (pos, command)
        for command in (PRIVMSG, USERNOTICE)
        if (pos := line.find(command)) != -1
    ]
    return min(positions)[1] if positions else None


def _channel_after(line: str, command: str) -> str:
    return channel_from_params(line.split(command, 1)[1]) or ""


def _privmsg_fields(line: str) -> dict[str, Any]:
    # ":nick!user@host PRIVMSG #chan :text" -> nick between first ':' and '!',
    # text after the last ':'
    user_start = line.find(":") + 1
    user_end = line.find("!", user_start)
    if user_end == -1:
        raise ParseWarning("PRIVMSG without nick!user prefix", data={"raw": line})
    return {
        "type": MessageType.REGULAR_CHAT,
        "username": line[user_start:user_end].lower(),
        "message": line[line.rfind(":") + 1 :],
        "channel": _channel_after(line, PRIVMSG),
    }


def _usernotice_fields(line: str, tags: Mapping[str, str]) -> dict[str, Any]:
    # The prefix of a notice is the server, the user comes from the login tag.
    text_start = line.rfind(":")
    message = line[text_start + 1 :] if 0 < text_start < len(line) - 1 else ""
    notice = parse_notice(tags)
    return {
        "type": MessageType.USER_NOTICE,
        "username": tags.get("login", "").lower(),
        "message": message,
        "channel": _channel_after(line, USERNOTICE),
        "notice_type": notice.notice_type,
        "system_message": notice.system_message,
        "sub_months": notice.sub_months,
        "raid_from": notice.raid_from,
        "raid_viewers": notice.raid_viewers,
    }


def _apply_badges(fields: dict[str, Any], tags: Mapping[str, str]) -> None:
    badge_set = parse_badges(tags.get("badges", ""))
    fields["badges"] = badge_set.badges
    fields["is_subscriber"] = badge_set.is_subscriber
    fields["is_moderator"] = badge_set.is_moderator
    fields["is_vip"] = badge_set.is_vip
    fields["is_broadcaster"] = badge_set.is_broadcaster


def _apply_emotes(
    fields: dict[str, Any], tags: Mapping[str, str], emote_only_ratio: float
) -> None:
    value = tags.get("emotes", "")
    if not value:
        return
    try:
        emotes = parse_emotes(value, fields["message"])
    except MalformedTagWarning as w:
        _log_malformed_tag(w, fields)
        return
    fields["emotes"] = emotes
    fields["has_emotes"] = bool(emotes)
    if fields["type"] is MessageType.REGULAR_CHAT and is_emote_only(
        fields["message"], emotes, emote_only_ratio
    ):
        fields["type"] = MessageType.EMOTE_ONLY


def _apply_bits(fields: dict[str, Any], tags: Mapping[str, str]) -> None:
    value = tags.get("bits", "")
    if not value:
        return
    try:
        amount = int(value)
    except ValueError:
        _log_malformed_tag(MalformedTagWarning("bits", value, "not an integer"), fields)
        return
    fields["has_bits"] = True
    fields["bits_amount"] = amount
    fields["type"] = MessageType.BITS_CHEER


def _log_malformed_tag(warning: MalformedTagWarning, fields: Mapping[str, Any]) -> None:
    logger.log_event(
        "chat",
        "malformed_tag",
        level=logging.WARNING,
        channel=fields.get("channel"),
        tag=warning.tag,
        value=warning.value,
        error=str(warning),
        username=fields.get("username"),
    )
