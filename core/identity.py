"""Sender identity resolution for parsed Telegram updates."""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.logger import AlertorLogger

if TYPE_CHECKING:  # core must not import sdk at runtime
    from sdk.models import Update

logger = AlertorLogger.get_logger()


def get_identity(update: "Update") -> str | None:
    """Extract the sender ID from a Telegram update as a decimal string.

    Callback queries are attributed to the user who pressed the button.
    For messages, the ``sender_chat`` ID (a negative group ID) wins over
    ``from.id`` so anonymous admins and channels get a stable identity.
    """
    # ── callback_query updates ───────────────────────────────────────────
    callback_query = update.callback_query
    if callback_query is not None:
        identity = str(callback_query.from_field.id)
        logger.debug("Resolved callback identity", extra={"identity": identity, "source": "from"})
        return identity

    # ── message-based updates ────────────────────────────────────────────
    message = update.message
    if message is None:
        logger.debug("No message object found in update", extra={"update_id": update.update_id})
        return None

    # Anonymous admins post as the group itself; sender_chat.id is negative.
    if message.sender_chat is not None:
        identity = str(message.sender_chat.id)
        logger.debug("Resolved anonymous/channel identity", extra={"identity": identity, "source": "sender_chat"})
        return identity

    if message.from_field is not None:
        identity = str(message.from_field.id)
        logger.debug("Resolved user identity", extra={"identity": identity, "source": "from"})
        return identity

    logger.warning("Could not resolve identity from update", extra={"update_id": update.update_id})
    return None
