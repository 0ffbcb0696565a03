"""Publish/subscribe delivery of classified chat events.

Each transport owns one :class:`ChatEventBus`. Subscribers are callables
(sync or async) invoked in subscription order for every event, or async
iterators obtained from :meth:`ChatEventBus.stream`.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterator, Callable
from typing import Any

from ..logs.logger import logger
from .models import ChatMessage

MessageHandler = Callable[[ChatMessage], Any]

_CLOSED = object()


def _handler_name(handler: MessageHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class ChatEventBus:
    def __init__(self) -> None:
        self._subscribers: list[MessageHandler] = []
        self._queues: list[asyncio.Queue[Any]] = []
        self.published = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers) + len(self._queues)

    def subscribe(self, handler: MessageHandler) -> Callable[[], None]:
        """Register ``handler``; returns a callable that unsubscribes it."""
        self._subscribers.append(handler)
        logger.log_event(
            "chat",
            "subscriber_added",
            level=logging.DEBUG,
            subscriber=_handler_name(handler),
        )

        def _unsubscribe() -> None:
            self.unsubscribe(handler)

        return _unsubscribe

    def unsubscribe(self, handler: MessageHandler) -> bool:
        try:
            self._subscribers.remove(handler)
        except ValueError:
            return False
        logger.log_event(
            "chat",
            "subscriber_removed",
            level=logging.DEBUG,
            subscriber=_handler_name(handler),
        )
        return True

    def stream(self) -> AsyncIterator[ChatMessage]:
        """Async iterator over events published from now on.

        The iterator ends when :meth:`close` is called. Each stream has its
        own unbounded queue, so a slow consumer never blocks the publisher.
        """
        queue: asyncio.Queue[Any] = asyncio.Queue()
        self._queues.append(queue)
        return self._drain(queue)

    async def _drain(self, queue: asyncio.Queue[Any]) -> AsyncIterator[ChatMessage]:
        try:
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                yield item
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    async def publish(self, message: ChatMessage) -> None:
        """Deliver ``message`` to every subscriber in order.

        A failing subscriber is logged and skipped; it never affects the
        others or the caller.
        """
        self.published += 1
        for handler in list(self._subscribers):
            await self._deliver(handler, message)
        for queue in self._queues:
            queue.put_nowait(message)

    async def _deliver(self, handler: MessageHandler, message: ChatMessage) -> None:
        try:
            result = handler(message)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "chat",
                "subscriber_error",
                level=logging.ERROR,
                channel=message.channel,
                subscriber=_handler_name(handler),
                error=str(e),
                error_type=type(e).__name__,
            )

    def close(self) -> None:
        """End every open :meth:`stream`; callback subscribers stay registered."""
        for queue in list(self._queues):
            queue.put_nowait(_CLOSED)
