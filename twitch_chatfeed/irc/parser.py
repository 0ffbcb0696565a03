"""IRC message parsing utilities (routing only)."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..chat.tags import split_tags
from ..errors.internal import ParseWarning


@dataclass(slots=True)
class IRCMessage:
    raw: str
    prefix: str | None
    command: str | None
    params: str
    tags: dict[str, str] = field(default_factory=dict)


def parse_irc_message(raw_line: str) -> IRCMessage:
    """Best-effort split into prefix / command / params.

    Used to route numerics and server commands; chat lines are classified by
    :func:`twitch_chatfeed.chat.classifier.classify`.
    """
    original = raw_line
    tags: dict[str, str] = {}
    prefix: str | None = None
    params = ""
    command: str | None = None

    try:
        tags, raw_line = split_tags(raw_line)
    except ParseWarning:
        return IRCMessage(raw=original, prefix=None, command=None, params="")

    if raw_line.startswith(":"):
        remainder = raw_line[1:]
        if " " in remainder:
            prefix, raw_line = remainder.split(" ", 1)
        else:  # malformed; treat whole remainder as prefix and leave rest empty
            prefix = remainder
            raw_line = ""

    if " :" in raw_line:
        raw_line, params = raw_line.split(" :", 1)

    parts = raw_line.split()
    if parts:
        command = parts[0]
        if len(parts) > 1:
            middle = parts[1:]
            params = (" ".join(middle) + (f" {params}" if params else "")).strip()

    return IRCMessage(
        raw=original, prefix=prefix, command=command, params=params, tags=tags
    )
