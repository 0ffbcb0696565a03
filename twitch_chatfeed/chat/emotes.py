"""Emote span parsing and the emote-only heuristic.

The ``emotes`` tag lists groups separated by '/', each ``id:start-end,...``
with inclusive character offsets into the message body, e.g.
``25:0-4,12-16/1902:6-10``.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..constants import EMOTE_ONLY_COVERAGE_RATIO
from ..errors.internal import MalformedTagWarning
from .models import EmoteInfo


def _parse_offset(text: str, value: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise MalformedTagWarning("emotes", value, f"bad offset {text!r}")
    return int(text)


def parse_emotes(value: str, message: str) -> tuple[EmoteInfo, ...]:
    """Parse an ``emotes`` tag value against the message body.

    A span whose offsets fall outside ``message`` is kept with an empty
    ``emote_name``.

    Raises:
        MalformedTagWarning: If any group or position breaks the grammar.
    """
    emotes: list[EmoteInfo] = []
    for group in value.split("/"):
        emote_id, sep, positions = group.partition(":")
        if not sep or not emote_id or not positions or ":" in positions:
            raise MalformedTagWarning("emotes", value, f"bad group {group!r}")
        for position in positions.split(","):
            start_text, dash, end_text = position.partition("-")
            if not dash:
                raise MalformedTagWarning("emotes", value, f"bad range {position!r}")
            start = _parse_offset(start_text, value)
            end = _parse_offset(end_text, value)
            if start > end:
                raise MalformedTagWarning("emotes", value, f"reversed range {position!r}")
            name = message[start : end + 1] if end < len(message) else ""
            emotes.append(
                EmoteInfo(
                    emote_id=emote_id,
                    emote_name=name,
                    start_index=start,
                    end_index=end,
                )
            )
    return tuple(emotes)


def emote_coverage(emotes: Sequence[EmoteInfo]) -> int:
    """Total emote characters; overlapping spans are counted twice."""
    return sum(e.length for e in emotes)


def is_emote_only(
    message: str,
    emotes: Sequence[EmoteInfo],
    ratio: float = EMOTE_ONLY_COVERAGE_RATIO,
) -> bool:
    """Whether emotes cover at least ``ratio`` of the non-whitespace characters."""
    if not emotes:
        return False
    non_whitespace = sum(1 for c in message if not c.isspace())
    return emote_coverage(emotes) >= non_whitespace * ratio
