"""Slash-command handlers.

Each handler is registered on :data:`bot.registry.commands` and receives
the :class:`~bot.dispatcher.EventRouter` that dispatched it, which gives
access to the sender, the command executor and the follow registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.logger import AlertorLogger
from bot.events import Command
from bot.registry import commands

if TYPE_CHECKING:
    from bot.dispatcher import EventRouter

logger = AlertorLogger.get_logger()

WELCOME_TEXT = "歡迎使用 Ptt Alertor\n輸入「指令」查看相關功能。"


@commands.register("add", "del")
async def handle_subscription(router: "EventRouter", event: Command) -> None:
    """Handle /add and /del — rebuild ``"<name> <arguments>"`` for the backend."""
    text = f"{event.name} {event.arguments}"
    response = await router.execute(text, event.sender_id)
    await router.sender.send(event.destination_id, response)


@commands.register("start")
async def handle_start(router: "EventRouter", event: Command) -> None:
    """Handle /start — register the chat for notifications and greet the user."""
    logger.info("User invoked /start", extra={"user_id": event.sender_id, "chat_id": event.destination_id})
    await router.follow(event.sender_id, event.destination_id)
    await router.sender.send(event.destination_id, WELCOME_TEXT)


@commands.register("help", "list", "ranking")
async def handle_passthrough(router: "EventRouter", event: Command) -> None:
    """Handle /help, /list and /ranking — the command name alone is the backend command."""
    response = await router.execute(event.name, event.sender_id)
    await router.sender.send(event.destination_id, response)


@commands.register("showkeyboard")
async def handle_show_keyboard(router: "EventRouter", event: Command) -> None:
    await router.sender.send_keyboard_control(event.destination_id, show=True)


@commands.register("hidekeyboard")
async def handle_hide_keyboard(router: "EventRouter", event: Command) -> None:
    await router.sender.send_keyboard_control(event.destination_id, show=False)
