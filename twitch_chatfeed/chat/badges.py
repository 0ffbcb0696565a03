"""Badge tag interpretation."""

from __future__ import annotations

from dataclasses import dataclass

BADGE_FLAGS = {
    "subscriber/": "is_subscriber",
    "moderator/": "is_moderator",
    "vip/": "is_vip",
    "broadcaster/": "is_broadcaster",
}


@dataclass(frozen=True, slots=True)
class BadgeSet:
    badges: tuple[str, ...] = ()
    is_subscriber: bool = False
    is_moderator: bool = False
    is_vip: bool = False
    is_broadcaster: bool = False


def parse_badges(value: str) -> BadgeSet:
    """Interpret a ``badges`` tag such as ``broadcaster/1,subscriber/12``.

    Every token is kept in order; unknown badges set no flag.
    """
    if not value:
        return BadgeSet()
    tokens = tuple(value.split(","))
    flags = dict.fromkeys(BADGE_FLAGS.values(), False)
    for token in tokens:
        for prefix, flag in BADGE_FLAGS.items():
            if token.startswith(prefix):
                flags[flag] = True
                break
    return BadgeSet(badges=tokens, **flags)
