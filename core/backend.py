"""Command backend contracts and their HTTP implementation.

The Telegram channel does not interpret commands itself.  Every command
string is handed to a :class:`CommandExecutor`, which always answers with
human-readable text, and ``/start`` registers the chat with a
:class:`FollowRegistry` so the backend can push notifications later.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import requests

from core.logger import AlertorLogger

logger = AlertorLogger.get_logger()

PLATFORM = "telegram"
BACKEND_UNAVAILABLE_TEXT = "系統忙碌中，請稍後再試。"


@runtime_checkable
class CommandExecutor(Protocol):
    """Interprets a command string and returns the reply text."""

    def execute(self, command_text: str, sender_id: str, interactive: bool) -> str: ...  # noqa: E704


@runtime_checkable
class FollowRegistry(Protocol):
    """Remembers which chat a user should be notified in."""

    def register(self, sender_id: str, chat_id: int) -> None: ...  # noqa: E704


class HttpCommandBackend:
    """:class:`CommandExecutor` and :class:`FollowRegistry` over HTTP.

    Every call is a standalone :func:`requests.post`, so one instance can
    be shared by any number of concurrently running tasks.

    Failures never escape: :meth:`execute` encodes them into
    :data:`BACKEND_UNAVAILABLE_TEXT` and :meth:`register` only logs them.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(self, base_url: str, timeout: int = _DEFAULT_TIMEOUT) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _post(self, endpoint: str, payload: dict) -> dict:
        response = requests.post(f"{self._base_url}/{endpoint}", json=payload, timeout=self._timeout)
        response.raise_for_status()
        return response.json()

    def execute(self, command_text: str, sender_id: str, interactive: bool) -> str:
        payload = {
            "command": command_text,
            "user_id": sender_id,
            "platform": PLATFORM,
            "interactive": interactive,
        }
        try:
            body = self._post("command", payload)
        except (requests.RequestException, ValueError) as exc:
            logger.error("Command backend request failed", extra={"user_id": sender_id, "command": command_text, "error": str(exc)})
            return BACKEND_UNAVAILABLE_TEXT

        response_text = body.get("response") if isinstance(body, dict) else None
        if not isinstance(response_text, str):
            logger.error("Command backend returned no response text", extra={"user_id": sender_id, "body": body})
            return BACKEND_UNAVAILABLE_TEXT
        return response_text

    def register(self, sender_id: str, chat_id: int) -> None:
        payload = {"user_id": sender_id, "chat_id": chat_id, "platform": PLATFORM}
        try:
            self._post("follow", payload)
        except (requests.RequestException, ValueError) as exc:
            logger.error("Follow registration failed", extra={"user_id": sender_id, "chat_id": chat_id, "error": str(exc)})
            return
        logger.info("Follow registered", extra={"user_id": sender_id, "chat_id": chat_id})
