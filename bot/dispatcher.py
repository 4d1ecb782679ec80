"""Event router — turns one Telegram update into at most one reply.

Routes each incoming update to :mod:`bot.callbacks`, a handler registered
in :mod:`bot.handlers`, or the free-text path below.  Free text that
matches the confirmation gate gets a yes/no prompt instead of being run.

The router holds no per-event state.  Its collaborators (the sender, the
command executor and the follow registry) are shared by every concurrently
dispatched event and must themselves tolerate concurrent calls.
"""

from __future__ import annotations

import asyncio
from typing import Any

from pydantic import ValidationError

from core.backend import CommandExecutor, FollowRegistry
from core.logger import AlertorLogger
from sdk.models import Update
from bot.callbacks import handle_callback_answer
from bot.confirmation import PayloadTooLongError, build_prompt, requires_confirmation
from bot.events import CallbackAnswer, Command, FreeText, InboundEvent, classify
from bot.registry import CommandRegistry, commands as default_commands
from bot.sender import MessageSender

# Import handlers module so @commands.register decorators execute.
import bot.handlers as _handlers  # noqa: F401

logger = AlertorLogger.get_logger()

UNKNOWN_COMMAND_TEXT = "I don't know the command"
PAYLOAD_TOO_LONG_TEXT = "指令過長，無法確認，請縮短指令後再試。"


class EventRouter:
    """Dispatch :data:`~bot.events.InboundEvent` objects to their handlers."""

    def __init__(
        self,
        sender: MessageSender,
        executor: CommandExecutor,
        follow_registry: FollowRegistry,
        commands: CommandRegistry = default_commands,
    ) -> None:
        self.sender = sender
        self._executor = executor
        self._follow_registry = follow_registry
        self._commands = commands

    # ── collaborator calls ───────────────────────────────────────────────

    async def execute(self, command_text: str, sender_id: str) -> str:
        """Run *command_text* on the executor in a worker thread."""
        response = await asyncio.to_thread(self._executor.execute, command_text, sender_id, True)
        logger.info("Command response", extra={"user_id": sender_id, "response_preview": response[:80]})
        return response

    async def follow(self, sender_id: str, chat_id: int) -> None:
        await asyncio.to_thread(self._follow_registry.register, sender_id, chat_id)

    # ── entry points ─────────────────────────────────────────────────────

    async def process_update(self, update: Update | dict[str, Any]) -> None:
        """Parse, classify and dispatch a single Telegram update.

        Undecodable updates are logged and dropped; updates with nothing to
        act on are skipped silently.
        """
        if not isinstance(update, Update):
            try:
                update = Update.model_validate(update)
            except ValidationError as exc:
                logger.warning("Failed to parse update into SDK model", extra={"error": str(exc)})
                return

        event = classify(update)
        if event is None:
            return
        await self.dispatch(event)

    async def dispatch(self, event: InboundEvent) -> None:
        """Route *event* to the matching handler."""
        if isinstance(event, CallbackAnswer):
            logger.info("Telegram Callback Received", extra={"user_id": event.sender_id, "data": event.payload})
            await handle_callback_answer(self, event)
        elif isinstance(event, Command):
            logger.info("Telegram Message Received", extra={"user_id": event.sender_id, "command": event.name})
            await self._handle_command(event)
        elif isinstance(event, FreeText):
            logger.info("Telegram Message Received", extra={"user_id": event.sender_id, "text": event.text})
            await self._handle_free_text(event)
        else:
            raise TypeError(f"unsupported event type: {type(event).__name__}")

    # ── branches ─────────────────────────────────────────────────────────

    async def _handle_command(self, event: Command) -> None:
        if await self._commands.dispatch(event.name, self, event):
            return
        logger.debug("No command matched", extra={"user_id": event.sender_id, "command": event.name})
        await self.sender.send(event.destination_id, UNKNOWN_COMMAND_TEXT)

    async def _handle_free_text(self, event: FreeText) -> None:
        if requires_confirmation(event.text):
            await self._send_confirmation(event)
            return
        response = await self.execute(event.text, event.sender_id)
        await self.sender.send(event.destination_id, response)

    async def _send_confirmation(self, event: FreeText) -> None:
        try:
            prompt = build_prompt(event.text)
        except PayloadTooLongError as exc:
            logger.warning(
                "Command too long for a confirmation button",
                extra={"user_id": event.sender_id, "chat_id": event.destination_id, "size": exc.size},
            )
            await self.sender.send(event.destination_id, PAYLOAD_TOO_LONG_TEXT)
            return
        await self.sender.send_interactive(event.destination_id, prompt.prompt_text, prompt.reply_markup())
