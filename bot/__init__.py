"""Telegram channel layer — polling, routing, confirmation, and delivery.

This package may import from ``core/`` and ``sdk/`` only.
"""

from bot.callbacks import handle_callback_answer
from bot.confirmation import ConfirmationPrompt, build_prompt, requires_confirmation
from bot.dispatcher import EventRouter
from bot.events import CallbackAnswer, Command, FreeText, classify
from bot.polling import UpdateLoop, handle_webhook_payload, poll_updates
from bot.registry import commands
from bot.sender import MessageSender, split_text

__all__ = [
    # Events
    "CallbackAnswer",
    "Command",
    "FreeText",
    "classify",
    # Routing
    "EventRouter",
    "commands",
    "handle_callback_answer",
    # Confirmation gate
    "ConfirmationPrompt",
    "build_prompt",
    "requires_confirmation",
    # Delivery
    "MessageSender",
    "split_text",
    # Update loop
    "UpdateLoop",
    "poll_updates",
    "handle_webhook_payload",
]
