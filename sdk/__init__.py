"""Telegram Bot API SDK — Pydantic models, service client, and exceptions.

The :class:`BotClient` class wraps the endpoints the channel needs with
synchronous methods; callers in ``bot/`` run them via
:func:`asyncio.to_thread`.

Usage::

    from sdk import BotClient, APIException
    from sdk.models import Update, Message, CallbackQuery
"""

from sdk.client import BotClient
from sdk.exceptions import APIException

__all__ = [
    "BotClient",
    "APIException",
]
