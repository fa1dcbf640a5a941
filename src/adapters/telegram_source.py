"""Queue-backed Telegram update source.

Telethon handlers only enqueue raw events. Mapping happens on the consumer
side, so messages reach the core in the order Telegram delivered them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from telethon import events

from adapters.telegram_mapper import build_inbound_message, build_title_change
from core.models import InboundMessage

LOGGER = logging.getLogger(__name__)

_Mapper = Callable[[Any], Awaitable[InboundMessage]]


class TelegramUpdateSource:
    """Async iterable of InboundMessage fed by Telethon event handlers."""

    def __init__(self, queue: Optional[asyncio.Queue] = None) -> None:
        self._queue: asyncio.Queue = queue if queue is not None else asyncio.Queue()

    def attach(self, client) -> None:
        """Register the message and title-change handlers on ``client``."""

        client.add_event_handler(self.on_new_message, events.NewMessage(incoming=True))
        client.add_event_handler(self.on_chat_action, events.ChatAction())

    async def on_new_message(self, event) -> None:
        self.put(build_inbound_message, event.message)

    async def on_chat_action(self, event) -> None:
        # Joins, leaves, pins and photo changes are not relayed.
        if not event.new_title:
            return
        self.put(build_title_change, event)

    def put(self, mapper: _Mapper, raw: Any) -> None:
        self._queue.put_nowait((mapper, raw))

    def __aiter__(self) -> AsyncIterator[InboundMessage]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[InboundMessage]:
        while True:
            mapper, raw = await self._queue.get()
            try:
                message = await mapper(raw)
            except Exception:
                LOGGER.exception("Failed to map incoming update")
                continue
            finally:
                self._queue.task_done()
            yield message
