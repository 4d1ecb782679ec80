"""Callback-query handling for inline keyboard buttons.

The only buttons this bot renders are confirmation prompts, so a callback
payload is either :data:`~bot.confirmation.CANCEL_PAYLOAD` or a command
string to execute exactly as it was stored in the button.  The payload
reaches the executor untouched, so the command run is the one the user
confirmed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.logger import AlertorLogger
from bot.confirmation import CANCEL_PAYLOAD
from bot.events import CallbackAnswer

if TYPE_CHECKING:
    from bot.dispatcher import EventRouter

logger = AlertorLogger.get_logger()

CANCELLED_TEXT = "取消"


async def handle_callback_answer(router: "EventRouter", event: CallbackAnswer) -> None:
    """Execute the confirmed command, or acknowledge a cancellation."""
    # Acknowledge the button press immediately so the spinner disappears.
    await router.sender.answer_callback(event.callback_id)

    if event.payload == CANCEL_PAYLOAD:
        logger.info("Confirmation cancelled", extra={"user_id": event.sender_id, "chat_id": event.destination_id})
        await router.sender.send(event.destination_id, CANCELLED_TEXT)
        return

    response = await router.execute(event.payload, event.sender_id)
    await router.sender.send(event.destination_id, response)
