"""IRCv3 tag extraction.

``@badges=broadcaster/1;emotes=25:0-4 :foo!foo@foo PRIVMSG #chan :Kappa``
splits into ``{"badges": "broadcaster/1", "emotes": "25:0-4"}`` and the rest
of the line. Values are kept raw; tag specific unescaping happens where the
tag is interpreted.
"""

from __future__ import annotations

from ..errors.internal import ParseWarning


def parse_tags(raw_tags: str) -> dict[str, str]:
    """Split a tag section (without the leading '@') into a mapping.

    Pairs are separated by ';' and split on the first '='; a key without '='
    maps to an empty string. Later duplicates win.
    """
    tags: dict[str, str] = {}
    for tag in raw_tags.split(";"):
        if not tag:
            continue
        if "=" in tag:
            k, v = tag.split("=", 1)
        else:
            k, v = tag, ""
        tags[k] = v
    return tags


def split_tags(raw_line: str) -> tuple[dict[str, str], str]:
    """Separate the tag section from the rest of the line.

    Returns ``(tags, remainder)``. Lines without a leading '@' have no tags.

    Raises:
        ParseWarning: If the line starts with '@' but has no space ending the
            tag section.
    """
    if not raw_line.startswith("@"):
        return {}, raw_line
    tag_end = raw_line.find(" ")
    if tag_end == -1:
        raise ParseWarning("tag section is not terminated", data={"raw": raw_line})
    return parse_tags(raw_line[1:tag_end]), raw_line[tag_end + 1 :]


def channel_from_params(params: str) -> str | None:
    """Return the first ``#channel`` token of a params string, lowercased."""
    for token in params.split():
        if token.startswith("#"):
            return token[1:].lower()
    return None
