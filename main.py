"""Process entry point — authenticate, wire the collaborators, start polling.

Failing to authenticate with Telegram is fatal: the process logs the error
and exits with status 1.  Everything after that is handled per event and
only ever logged.
"""

import asyncio
import sys

import requests

from config import COMMAND_BACKEND_URL, BASE_URL, LOG_LEVEL, MAX_IN_FLIGHT, POLL_TIMEOUT, TELEGRAM_TOKEN
from core.backend import HttpCommandBackend
from core.logger import AlertorLogger
from sdk.client import BotClient
from sdk.exceptions import APIException
from bot.dispatcher import EventRouter
from bot.polling import UpdateLoop, poll_updates
from bot.sender import MessageSender

logger = AlertorLogger.get_logger()


def authenticate(client: BotClient) -> str:
    """Check the token with ``getMe`` and return the bot's username.

    Raises:
        APIException: If Telegram rejects the token.
        requests.RequestException: If Telegram cannot be reached.
    """
    data = client.get_me()
    return data.get("result", {}).get("username", "")


def build_loop(client: BotClient) -> UpdateLoop:
    """Wire one shared client and backend into a ready-to-run update loop."""
    backend = HttpCommandBackend(COMMAND_BACKEND_URL)
    router = EventRouter(MessageSender(client), executor=backend, follow_registry=backend)
    return UpdateLoop(router, poll_updates(client, timeout=POLL_TIMEOUT), max_in_flight=MAX_IN_FLIGHT)


def main() -> None:
    if not TELEGRAM_TOKEN:
        raise EnvironmentError("TELEGRAM_TOKEN environment variable is not set or is empty.")

    AlertorLogger.set_level(LOG_LEVEL)
    client = BotClient(BASE_URL)
    try:
        username = authenticate(client)
    except APIException as exc:
        logger.critical("Telegram Bot Initialize Failed", extra={"status_code": exc.status_code, "error": exc.description})
        sys.exit(1)
    except requests.RequestException as exc:
        logger.critical("Telegram Bot Initialize Failed", extra={"error": type(exc).__name__})
        sys.exit(1)
    logger.info("Telegram Authorized", extra={"bot_username": username})

    try:
        asyncio.run(build_loop(client).run())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user.")


if __name__ == "__main__":
    main()
