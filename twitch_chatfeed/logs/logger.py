"""Event logger used across the chat feed.

Every record is an event ``(domain, action)`` rendered through the template
catalog in ``event_templates.json``. Records go to the ``twitch_chatfeed``
stdlib logger; handlers and colors come from
:mod:`twitch_chatfeed.logging_config`.

Concise mode (default)::

    [#somechannel             ] 🔌 Disconnected
    💬 #somechannel viewer: hello

Debug mode (``DEBUG=1``) prefixes the event name and appends the context::

    irc_disconnected                 [#somechannel             ] 🔌 Disconnected
"""

from __future__ import annotations

import logging

from ..logging_config import debug_enabled

EVENT_COLUMN_WIDTH = 32
CHANNEL_COLUMN_WIDTH = 24
# Events rendered as chat lines rather than status lines.
CHAT_EVENTS = frozenset({"chat_message", "chat_notice"})


def render_template(domain: str, action: str, fields: dict[str, object]) -> tuple[str, bool]:
    """Return ``(text, derived)``; ``derived`` is True when no template exists."""
    # Local import to avoid cyclic import issues during module init.
    from .event_catalog import EVENT_TEMPLATES

    template = EVENT_TEMPLATES.get((domain, action))
    if template is None:
        return f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}", True
    try:
        return template.format(**fields), False
    except (KeyError, IndexError, ValueError):
        return template, False


class BotLogger:
    def __init__(self, name: str = "twitch_chatfeed") -> None:
        self.logger = logging.getLogger(name)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        channel = kwargs.pop("channel", None)
        if human is None:
            human, derived = render_template(
                domain, action, {"channel": channel, **kwargs}
            )
            if derived:
                kwargs["derived"] = True
        event_name = f"{domain}_{action}".lower()
        channel_name = channel if isinstance(channel, str) and channel else None
        if debug_enabled():
            msg = self._debug_line(event_name, channel_name, human, kwargs)
        else:
            msg = self._concise_line(event_name, channel_name, human)
        self.logger.log(level, msg, exc_info=exc_info)

    @staticmethod
    def _prefix(channel: str | None) -> str:
        label = f"#{channel}" if channel else "chatfeed"
        return f"[{label.ljust(CHANNEL_COLUMN_WIDTH)[:CHANNEL_COLUMN_WIDTH]}]"

    def _debug_line(
        self,
        event_name: str,
        channel: str | None,
        human: str,
        context: dict[str, object],
    ) -> str:
        if len(event_name) > EVENT_COLUMN_WIDTH:
            event_name = event_name[: EVENT_COLUMN_WIDTH - 1] + "…"
        line = f"{event_name.ljust(EVENT_COLUMN_WIDTH)} {self._prefix(channel)} {human}"
        if context:
            line += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        return line

    def _concise_line(self, event_name: str, channel: str | None, human: str) -> str:
        if event_name in CHAT_EVENTS and channel:
            return f"💬 #{channel} {human}"
        return f"{self._prefix(channel)} {human}"


logger = BotLogger()
