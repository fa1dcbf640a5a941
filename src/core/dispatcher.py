"""In-chat command handling.

The dispatcher keeps no state between calls. It answers in chat through the
reply port and, for token requests, asks the backend for a dashboard token.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable
from urllib.parse import urlencode

from core.config import RelayConfig
from core.models import InboundMessage, ParsedCommand
from core.ports import BackendPort, GatewayError, ReplyPort

LOGGER = logging.getLogger(__name__)

TOKEN_FAILURE_TEXT = "Couldn't fetch your token, try again later."


class CommandDispatcher:
    """Maps command names to replies and backend lookups."""

    def __init__(self, config: RelayConfig, backend: BackendPort, replier: ReplyPort) -> None:
        self._config = config
        self._backend = backend
        self._replier = replier
        self._handlers: dict[str, Callable[[ParsedCommand, InboundMessage], Awaitable[None]]] = {
            "info": self._info,
            "token": self._token,
            "start": self._start,
            "echo": self._echo,
        }

    async def dispatch(self, command: ParsedCommand, message: InboundMessage) -> None:
        handler = self._handlers.get(command.name)
        if handler is None:
            LOGGER.info("Ignoring unknown command /%s in chat %s", command.name, message.chat_id)
            return
        LOGGER.info("Command /%s from user %s in chat %s", command.name, message.user.id, message.chat_id)
        await handler(command, message)

    async def _info(self, command: ParsedCommand, message: InboundMessage) -> None:
        await self._replier.reply(message, f"userid: {message.user.id}\nchatid: {message.chat_id}")

    async def _token(self, command: ParsedCommand, message: InboundMessage) -> None:
        await self._deliver_token(message)

    async def _start(self, command: ParsedCommand, message: InboundMessage) -> None:
        secret = self._config.start_secret
        if not secret or command.arguments != secret:
            LOGGER.info("Ignoring /start without a valid secret from user %s", message.user.id)
            return
        await self._deliver_token(message)

    async def _echo(self, command: ParsedCommand, message: InboundMessage) -> None:
        if not command.arguments:
            LOGGER.info("Ignoring empty /echo in chat %s", message.chat_id)
            return
        await self._replier.reply(message, command.arguments, markdown=True)

    async def _deliver_token(self, message: InboundMessage) -> None:
        user_id = message.user.id
        try:
            token = await asyncio.to_thread(self._fetch_token, user_id)
        except GatewayError as exc:
            LOGGER.warning("Token request for user %s failed: %s", user_id, exc)
            await self._replier.reply(message, TOKEN_FAILURE_TEXT)
            return
        # Tokens go to the private chat only, even when asked from a group.
        await self._replier.send_direct(user_id, self.token_text(token))

    def _fetch_token(self, user_id: int) -> str:
        document = self._backend.get(f"generate_token/{user_id}")
        token = document.get("token") if isinstance(document, dict) else None
        if not isinstance(token, str) or not token:
            raise GatewayError(f"No token in backend response: {document!r}")
        return token

    def token_text(self, token: str) -> str:
        dashboard = self._config.dashboard_url
        if not dashboard:
            return f"token: {token}"
        return f"{dashboard.rstrip('/')}/login?{urlencode({'token': token})}"
