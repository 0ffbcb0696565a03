"""Centralized internal error hierarchy.

These exceptions give the transport and the classifier semantic categories
for propagation. Transport failures are raised to the caller; parsing
failures never leave the line they were raised for.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Transport layer issues.
  ChatConnectionError  – Socket could not be opened, dropped, or went stale.
  ParsingError         – A chat line or tag could not be interpreted.
  ParseWarning         – A whole line was skipped.
  MalformedTagWarning  – A single tag failed its sub-grammar and was ignored.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors."""


class ChatConnectionError(NetworkError, ConnectionError):
    """Raised when the chat socket cannot be opened or is lost.

    Subclasses the builtin ``ConnectionError`` so callers may catch either.
    The transport has already disconnected when this is raised; retrying is
    the caller's decision.
    """


class ParsingError(InternalError):
    """Exception raised when chat input cannot be interpreted."""


class ParseWarning(ParsingError):
    """A raw line could not be classified and was skipped."""


class MalformedTagWarning(ParsingError):
    """A tag value did not match its grammar; only that tag is dropped.

    Args:
        tag: Name of the offending tag (e.g. ``emotes``).
        value: The raw tag value.
    """

    def __init__(self, tag: str, value: str, reason: str = "malformed") -> None:
        super().__init__(
            f"Malformed {tag} tag ({reason}): {value!r}",
            data={"tag": tag, "value": value, "reason": reason},
        )
        self.tag = tag
        self.value = value


__all__ = [
    "InternalError",
    "NetworkError",
    "ChatConnectionError",
    "ParsingError",
    "ParseWarning",
    "MalformedTagWarning",
]
