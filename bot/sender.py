"""Outbound delivery — chunked text, inline prompts, and reply keyboards.

:class:`MessageSender` owns the shared :class:`~sdk.client.BotClient` and is
the only place that sends messages.  Blocking client calls run in a worker
thread via :func:`asyncio.to_thread`.  Failures are logged with the
destination and never raised to the caller.
"""

from __future__ import annotations

import asyncio

import requests

from core.logger import AlertorLogger
from sdk.client import BotClient
from sdk.exceptions import APIException
from sdk.models import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove

logger = AlertorLogger.get_logger()

TELEGRAM_MAX_MESSAGE_LENGTH = 4096

SHOW_KEYBOARD_TEXT = "顯示小鍵盤"
HIDE_KEYBOARD_TEXT = "隱藏小鍵盤"
KEYBOARD_LABELS = ("清單", "推文清單", "排行", "指令")


def _fitting_prefix(text: str, max_units: int) -> int:
    """Index of the longest prefix of *text* within *max_units* UTF-16 code units.

    Telegram counts message length in UTF-16 code units, so characters
    outside the Basic Multilingual Plane take two.
    """
    units = 0
    for index, char in enumerate(text):
        units += 2 if ord(char) > 0xFFFF else 1
        if units > max_units:
            return index
    return len(text)


def split_text(text: str, max_length: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> list[str]:
    """Split *text* into chunks of at most *max_length* UTF-16 code units.

    Each cut happens at the last line break that keeps the chunk within the
    limit, and that line break is dropped.  When no line break is within
    reach the text is cut hard at the limit, never inside a surrogate pair.
    Joining the chunks with the removed breaks restores the original text.
    Empty text yields no chunks.
    """
    chunks: list[str] = []
    rest = text
    while True:
        limit = _fitting_prefix(rest, max_length)
        if limit == len(rest):
            break
        limit = max(limit, 1)
        cut = rest.rfind("\n", 0, limit + 1)
        if cut == -1:
            chunks.append(rest[:limit])
            rest = rest[limit:]
        else:
            chunks.append(rest[:cut])
            rest = rest[cut + 1:]
    if rest:
        chunks.append(rest)
    return chunks


def reply_keyboard_markup() -> dict:
    """The persistent shortcut keyboard shown by ``/showkeyboard``."""
    markup = ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=label) for label in KEYBOARD_LABELS]],
        resize_keyboard=True,
    )
    return markup.model_dump(exclude_none=True)


class MessageSender:
    """Deliver text to Telegram chats through one shared client.

    Safe for concurrent use: the sender keeps no per-message state, and the
    chunks of one message are awaited one after another so they arrive in
    order.
    """

    def __init__(self, client: BotClient, max_length: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> None:
        self._client = client
        self._max_length = max_length

    async def _deliver(self, chat_id: int, text: str, **options: object) -> bool:
        """Send one message; return ``True`` when Telegram accepted it."""
        try:
            data = await asyncio.to_thread(self._client.send_message, chat_id, text, **options)
        except APIException as exc:
            logger.error(
                "Telegram Send Message Failed",
                extra={"chat_id": chat_id, "api_endpoint": "sendMessage", "status_code": exc.status_code, "error": exc.description},
            )
            return False
        except requests.RequestException as exc:
            logger.error("Telegram Send Message Failed", extra={"chat_id": chat_id, "api_endpoint": "sendMessage", "error": type(exc).__name__})
            return False

        if not data.get("ok"):
            logger.warning("sendMessage Telegram error", extra={"chat_id": chat_id, "api_endpoint": "sendMessage", "api_response": data})
            return False
        logger.info("Telegram Message Sent", extra={"chat_id": chat_id, "api_endpoint": "sendMessage"})
        return True

    async def send(self, chat_id: int, text: str) -> int:
        """Send *text* as one or more chunks, in order.

        A failed chunk is logged and the remaining chunks are still sent.
        Link previews are disabled.  Returns the number of chunks delivered.
        """
        delivered = 0
        for chunk in split_text(text, self._max_length):
            # Telegram rejects empty messages; a blank chunk comes from a
            # line break sitting right at a cut point.
            if not chunk.strip():
                continue
            if await self._deliver(chat_id, chunk, disable_web_page_preview=True):
                delivered += 1
        return delivered

    async def send_interactive(self, chat_id: int, text: str, reply_markup: dict) -> bool:
        """Send *text* with an inline keyboard attached."""
        return await self._deliver(chat_id, text, reply_markup=reply_markup)

    async def send_keyboard_control(self, chat_id: int, show: bool) -> bool:
        """Show or remove the persistent shortcut keyboard."""
        if show:
            return await self._deliver(chat_id, SHOW_KEYBOARD_TEXT, reply_markup=reply_keyboard_markup())
        markup = ReplyKeyboardRemove(remove_keyboard=True).model_dump(exclude_none=True)
        return await self._deliver(chat_id, HIDE_KEYBOARD_TEXT, reply_markup=markup)

    async def answer_callback(self, callback_id: str) -> None:
        """Acknowledge a button press so the client stops its spinner."""
        if not callback_id:
            return
        try:
            await asyncio.to_thread(self._client.answer_callback_query, callback_id)
        except APIException as exc:
            logger.warning(
                "answerCallbackQuery failed",
                extra={"api_endpoint": "answerCallbackQuery", "callback_query_id": callback_id, "status_code": exc.status_code, "error": exc.description},
            )
        except requests.RequestException as exc:
            logger.warning(
                "answerCallbackQuery failed",
                extra={"api_endpoint": "answerCallbackQuery", "callback_query_id": callback_id, "error": type(exc).__name__},
            )
