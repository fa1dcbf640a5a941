"""Bot session factory.

The bot authenticates with its token in ``app._run``; this module only builds
the MTProto client that the token login runs on.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient

LOGGER = logging.getLogger(__name__)

DEFAULT_SESSION_NAME = "relaybot"


def build_client() -> TelegramClient:
    """Build the Telethon client behind the bot.

    Even a bot account needs an application's ``API_ID``/``API_HASH``; they
    come from the environment or a ``.env`` file. ``SESSION_NAME`` picks the
    ``.session`` file that caches the bot's authorization between restarts.
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    if not api_id or not api_hash:
        raise RuntimeError("API_ID and API_HASH must be set for the bot session")

    session_name = os.getenv("SESSION_NAME") or DEFAULT_SESSION_NAME
    LOGGER.info("Opening bot session %r", session_name)

    # Handlers run one at a time, in the order Telegram delivers updates.
    return TelegramClient(session_name, int(api_id), api_hash, sequential_updates=True)
