"""Inbound event model — every Telegram update becomes one of three shapes.

:func:`classify` is total: a parsed :class:`~sdk.models.Update` maps to a
:class:`CallbackAnswer`, a :class:`Command`, a :class:`FreeText`, or
``None`` when the update carries nothing to act on.
"""

from __future__ import annotations

import dataclasses
from typing import Union

from core.identity import get_identity
from core.logger import AlertorLogger
from sdk.models import Message, Update

logger = AlertorLogger.get_logger()

COMMAND_PREFIX = "/"
COMMAND_ENTITY_TYPE = "bot_command"


@dataclasses.dataclass(frozen=True, slots=True)
class CallbackAnswer:
    """An inline button press; *payload* is the button's ``callback_data``."""
    sender_id: str
    destination_id: int
    payload: str
    callback_id: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class Command:
    """A slash-command such as ``/add Gossiping 問卦``."""
    sender_id: str
    destination_id: int
    name: str           # without the leading "/" and any "@botname"
    arguments: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class FreeText:
    """Any other non-empty message text."""
    sender_id: str
    destination_id: int
    text: str


InboundEvent = Union[CallbackAnswer, Command, FreeText]


def parse_command(text: str, length: int) -> tuple[str, str]:
    """Split ``/name@bot  args`` into ``("name", "args")``.

    *length* is the length of the leading ``bot_command`` entity.  Command
    names are ASCII, so its UTF-16 length equals its length in characters.
    Leading whitespace of the arguments is dropped; everything after it is
    kept exactly as typed.
    """
    name = text[len(COMMAND_PREFIX):length].split("@")[0]
    return name, text[length:].lstrip()


def command_entity_length(message: Message) -> int | None:
    """Length of the ``bot_command`` entity opening *message*, if any.

    Telegram marks a command with an entity at offset 0; text that merely
    starts with ``/`` (``"/ foo"``, ``"/刪除 A*"``) carries none.
    """
    for entity in message.entities or ():
        if entity.type == COMMAND_ENTITY_TYPE and entity.offset == 0:
            return entity.length
    return None


def classify(update: Update) -> InboundEvent | None:
    """Map *update* to exactly one :data:`InboundEvent` variant, or ``None``."""
    sender_id = get_identity(update)
    if sender_id is None:
        return None

    # ── Callback queries (inline button presses) ─────────────────────────
    callback_query = update.callback_query
    if callback_query is not None:
        if callback_query.data is None or callback_query.message is None:
            logger.debug("Callback without data or origin message — skipping", extra={"update_id": update.update_id})
            return None
        return CallbackAnswer(
            sender_id=sender_id,
            destination_id=callback_query.message.chat.id,
            payload=callback_query.data,
            callback_id=callback_query.id,
        )

    # ── Plain messages ───────────────────────────────────────────────────
    message = update.message
    if message is None or not message.text:
        logger.debug("Update has no message text — skipping", extra={"update_id": update.update_id})
        return None

    text = message.text
    chat_id = message.chat.id
    length = command_entity_length(message)
    if length is not None:
        name, arguments = parse_command(text, length)
        return Command(sender_id=sender_id, destination_id=chat_id, name=name, arguments=arguments)

    return FreeText(sender_id=sender_id, destination_id=chat_id, text=text)
