"""Telegram reply adapter.

Sends command replies through the bot's own Telethon session. Delivery is
fire-and-forget for the core: failures are logged here and not re-raised.
"""

from __future__ import annotations

import logging

from core.models import InboundMessage

LOGGER = logging.getLogger(__name__)


class TelegramReplier:
    """ReplyPort implementation backed by a Telethon client."""

    def __init__(self, client) -> None:
        self._client = client

    async def reply(self, message: InboundMessage, text: str, markdown: bool = False) -> None:
        """Answer in the invoking chat, threaded under the original message."""

        # Telethon parses Markdown by default, so plain replies opt out explicitly.
        parse_mode = "md" if markdown else None
        try:
            await self._client.send_message(
                message.chat_id,
                text,
                reply_to=message.message_id or None,
                parse_mode=parse_mode,
            )
        except Exception:
            LOGGER.exception("Failed to reply in chat %s", message.chat_id)

    async def send_direct(self, user_id: int, text: str) -> None:
        """Write to the user's private chat with the bot."""

        try:
            await self._client.send_message(user_id, text, parse_mode=None, link_preview=False)
        except Exception:
            LOGGER.exception("Failed to send a direct message to user %s", user_id)
