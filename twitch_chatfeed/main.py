#!/usr/bin/env python3
"""
Main entry point for the Twitch chat feed
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_exponential,
)

from .chat.models import ChatMessage
from .config import ChatFeedConfig, ConfigError, load_config
from .errors.handling import log_error
from .errors.internal import ChatConnectionError
from .irc.async_irc import AsyncTwitchChat
from .logging_config import LoggerConfigurator, error_aggregator
from .logs.logger import logger

# Pause before reopening a session that dropped after joining.
SESSION_RESTART_DELAY = 1.0


def log_chat_event(message: ChatMessage) -> None:
    """Console subscriber: one log line per classified event."""
    if message.is_notice:
        logger.log_event(
            "chat",
            "notice",
            channel=message.channel,
            username=message.username,
            notice_type=message.notice_type.value if message.notice_type else "",
            system_message=message.system_message,
        )
        return
    logger.log_event(
        "chat",
        "message",
        channel=message.channel,
        username=message.display_name or message.username,
        text=message.message,
        message_type=message.type.value,
    )


def _log_reconnect(retry_state: RetryCallState) -> None:
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    logger.log_event(
        "irc",
        "reconnect_attempt",
        level=logging.WARNING,
        attempt=retry_state.attempt_number + 1,
        delay=delay,
        error=str(error) if error else "",
    )


def build_retrying(
    config: ChatFeedConfig,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncRetrying:
    """Reconnect policy: exponential backoff on connection failures only."""
    stop = (
        stop_after_attempt(config.reconnect_max_attempts)
        if config.reconnect_max_attempts > 0
        else stop_never
    )
    return AsyncRetrying(
        stop=stop,
        wait=wait_exponential(multiplier=1, max=config.reconnect_max_backoff),
        retry=retry_if_exception_type(ChatConnectionError),
        before_sleep=_log_reconnect,
        reraise=True,
        sleep=sleep,
    )


async def stream_chat(
    config: ChatFeedConfig,
    chat: AsyncTwitchChat,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """Keep ``chat`` connected until it is deliberately disconnected.

    A session that confirmed its join and later drops starts a fresh attempt
    budget, so ``reconnect_max_attempts`` bounds consecutive failures only.

    Raises:
        ChatConnectionError: reconnect attempts were exhausted.
    """
    while True:
        dropped: ChatConnectionError | None = None
        async for attempt in build_retrying(config, sleep):
            with attempt:
                await chat.connect(config.host, config.port, config.channel)
                try:
                    await chat.wait_closed()
                except ChatConnectionError as e:
                    if not chat.reached_ready:
                        raise
                    dropped = e
        if dropped is None:
            return
        logger.log_event(
            "irc",
            "session_dropped",
            level=logging.WARNING,
            channel=config.channel,
            error=str(dropped),
        )
        await sleep(SESSION_RESTART_DELAY)


async def main() -> None:
    """Load configuration, subscribe the console logger and stream chat."""
    try:
        config = load_config()
    except ConfigError as e:
        logger.log_event("app", "config_error", level=logging.ERROR, error=str(e))
        sys.exit(2)

    logger.log_event("app", "start", channel=config.channel)
    chat = AsyncTwitchChat.from_config(config)
    chat.subscribe(log_chat_event)
    try:
        await stream_chat(config, chat)
    except ChatConnectionError as e:
        logger.log_event(
            "irc",
            "reconnect_giving_up",
            level=logging.ERROR,
            channel=config.channel,
            attempts=config.reconnect_max_attempts,
        )
        log_error("Chat connection failed", e)
        sys.exit(1)
    finally:
        await chat.disconnect()
        chat.events.close()
        error_aggregator.log_summary_report()
        logger.log_event("app", "shutdown")


def run() -> None:
    """Synchronous entry point for the application.

    Raises:
        SystemExit: If a critical error occurs during execution.
    """
    LoggerConfigurator().configure()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted")
        sys.exit(0)
    except asyncio.CancelledError:
        sys.exit(0)
    except Exception as e:
        log_error("Top-level error", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
