"""Core update routing.

This module is integration-agnostic. It only relies on ports for the backend
and chat replies, and handles one update at a time:
1) Text: parse a slash-command and dispatch it
2) Title changes: forward to the title-update path
3) Everything else with a mapping: normalize and forward to the message path
4) Unhandled kinds: log and drop

A failure while handling one update never reaches the next one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterable, Mapping

from core.commands import parse_command
from core.dispatcher import CommandDispatcher
from core.models import ChatTitleChanged, InboundMessage, Text, Unhandled
from core.normalizer import build_title_update, normalize
from core.ports import BackendPort, GatewayError

LOGGER = logging.getLogger(__name__)

MESSAGE_PATH = "message"
NEW_TITLE_PATH = "chat_update/new_title"


class UpdateRouter:
    """Routes each inbound message to the dispatcher and the backend."""

    def __init__(self, dispatcher: CommandDispatcher, backend: BackendPort) -> None:
        self._dispatcher = dispatcher
        self._backend = backend

    async def consume(self, updates: AsyncIterable[InboundMessage]) -> None:
        """Handle updates strictly in arrival order, one at a time."""

        async for message in updates:
            await self.handle(message)

    async def handle(self, message: InboundMessage) -> None:
        try:
            await self._route(message)
        except Exception:
            LOGGER.exception("Error while handling message %s in chat %s", message.message_id, message.chat_id)

    async def _route(self, message: InboundMessage) -> None:
        payload = message.payload

        if isinstance(payload, ChatTitleChanged):
            record = build_title_update(message)
            LOGGER.info("Chat %s renamed to %r", message.chat_id, payload.title)
            await self._forward(NEW_TITLE_PATH, record.to_payload())
            return

        if isinstance(payload, Text):
            LOGGER.info("<%s>: %s", message.user.first_name, payload.text)
            command = parse_command(payload.text)
            if command is not None:
                try:
                    await self._dispatcher.dispatch(command, message)
                except Exception:
                    # Archival below still happens for failed commands.
                    LOGGER.exception("Command /%s failed in chat %s", command.name, message.chat_id)

        envelope = normalize(message)
        if envelope is None:
            kind = payload.kind if isinstance(payload, Unhandled) else type(payload).__name__
            LOGGER.info("Not forwarding %s message in chat %s", kind, message.chat_id)
            return
        await self._forward(MESSAGE_PATH, envelope.to_payload())

    async def _forward(self, path: str, payload: Mapping[str, Any]) -> None:
        try:
            response = await asyncio.to_thread(self._backend.post, path, payload)
        except GatewayError as exc:
            LOGGER.warning("Forwarding to %s failed: %s", path, exc)
            return
        LOGGER.debug("Backend %s response: %r", path, response)
