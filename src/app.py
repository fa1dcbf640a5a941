"""Application entry point for the relay bot."""

from __future__ import annotations

import argparse
import logging
import os
import re
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from art import tprint
from dotenv import load_dotenv

from adapters.backend_gateway import BackendGateway
from adapters.telegram_replier import TelegramReplier
from adapters.telegram_source import TelegramUpdateSource
from client import build_client
from core.dispatcher import CommandDispatcher
from core.router import UpdateRouter
from settings import DEFAULT_CONFIG_PATH, ConfigLoadError, Settings, load_settings

NAME = "RELAYBOT"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _secret_part(value: str) -> str:
    bot_id, separator, secret = value.partition(":")
    if separator and bot_id.isdigit() and secret:
        return secret
    return value


class _SecretMaskingFormatter(logging.Formatter):
    """Masks bot and backend tokens in every rendered log line.

    A bot token reads ``<bot id>:<secret>``; only the secret half is hidden so
    the bot id stays readable.
    """

    MASK = "<redacted>"

    def __init__(self, secrets: Iterable[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        hidden = sorted({_secret_part(value) for value in secrets if value}, key=len, reverse=True)
        self._pattern = re.compile("|".join(map(re.escape, hidden))) if hidden else None

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if self._pattern is None:
            return line
        return self._pattern.sub(self.MASK, line)


def _collect_redaction_values(config: dict, known_secrets: list[str]) -> list[str]:
    """Settings tokens plus the values of the env vars named under ``redact.patterns``."""

    redact_cfg = (config or {}).get("redact", {})
    env_names = redact_cfg.get("patterns", []) if redact_cfg.get("enabled", True) else []
    from_env = (os.getenv(name) for name in env_names)
    return sorted({value for value in (*known_secrets, *from_env) if value}, key=len, reverse=True)


def _configure_logging(config: dict, known_secrets: list[str]) -> None:
    config = config or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config, known_secrets)
    formatter = _SecretMaskingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/relaybot.log")
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers, force=True)
    # Telethon is chatty at INFO about connections and reconnects.
    logging.getLogger("telethon").setLevel(max(level, logging.WARNING))


def _run(settings: Settings) -> None:
    _print_banner()
    relay = settings.relay
    _configure_logging(settings.logging, [relay.bot_token, relay.backend_token])
    logger = logging.getLogger(__name__)

    logger.info("Starting relaybot")

    backend = BackendGateway(relay)
    client = build_client()
    replier = TelegramReplier(client)
    router = UpdateRouter(CommandDispatcher(relay, backend, replier), backend)

    source = TelegramUpdateSource()
    source.attach(client)

    # Explicit lifecycle management makes start/shutdown behavior obvious.
    client.start(bot_token=relay.bot_token)
    logger.info("Bot connected. Relaying updates to %s", relay.root_url)

    # A single consumer keeps updates strictly ordered, one at a time.
    consumer = client.loop.create_task(router.consume(source))
    try:
        client.run_until_disconnected()
    finally:
        consumer.cancel()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="relaybot")
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_PATH,
        metavar="FILE",
        help="Path to the TOML config file (default: %(default)s)",
    )

    args = parser.parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigLoadError as e:
        parser.exit(2, f"relaybot: {e}\n")
    _run(settings)


if __name__ == "__main__":
    main()
