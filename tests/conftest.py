"""Shared fakes for the channel tests.

The fakes record calls under a lock because the code under test invokes
them from worker threads via ``asyncio.to_thread``.
"""

import os
import re
import sys
import threading

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# What Telegram marks as a bot_command entity at the start of a message.
_COMMAND_TOKEN = re.compile(r"^/[A-Za-z0-9_]+(?:@[A-Za-z0-9_]+)?")


class FakeClient:
    """Stands in for :class:`sdk.client.BotClient`."""

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self._lock = threading.Lock()
        self.sent: list[dict] = []
        self.answered: list[str] = []
        self._fail_on = fail_on or set()
        self._calls = 0

    def send_message(self, chat_id, text, **options) -> dict:
        with self._lock:
            index = self._calls
            self._calls += 1
            if index in self._fail_on:
                from sdk.exceptions import APIException
                raise APIException(400, {"ok": False, "description": "Bad Request: chat not found"})
            self.sent.append({"chat_id": chat_id, "text": text, **options})
        return {"ok": True, "result": {}}

    def answer_callback_query(self, callback_query_id, text=None) -> dict:
        with self._lock:
            self.answered.append(callback_query_id)
        return {"ok": True, "result": True}


class FakeBackend:
    """Records executor and follow-registry calls."""

    def __init__(self, response: str = "ok") -> None:
        self._lock = threading.Lock()
        self.executed: list[tuple[str, str, bool]] = []
        self.followed: list[tuple[str, int]] = []
        self.response = response

    def execute(self, command_text: str, sender_id: str, interactive: bool) -> str:
        with self._lock:
            self.executed.append((command_text, sender_id, interactive))
        return self.response

    def register(self, sender_id: str, chat_id: int) -> None:
        with self._lock:
            self.followed.append((sender_id, chat_id))


@pytest.fixture()
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def router(client, backend):
    from bot.dispatcher import EventRouter
    from bot.sender import MessageSender

    return EventRouter(MessageSender(client), executor=backend, follow_registry=backend)


def make_message_update(user_id: int, text: str, chat_id: int = 1000, update_id: int = 1) -> dict:
    """Build a minimal Telegram update dict with a text message.

    A leading command gets the ``bot_command`` entity Telegram would attach.
    """
    message = {
        "message_id": 1,
        "date": 0,
        "chat": {"id": chat_id, "type": "private"},
        "from": {"id": user_id, "is_bot": False, "first_name": f"User{user_id}"},
        "text": text,
    }
    match = _COMMAND_TOKEN.match(text)
    if match:
        message["entities"] = [{"type": "bot_command", "offset": 0, "length": match.end()}]
    return {"update_id": update_id, "message": message}


def make_callback_update(user_id: int, data: str, chat_id: int = 1000, cb_id: str = "cb123", update_id: int = 2) -> dict:
    """Build a minimal callback_query update dict."""
    return {
        "update_id": update_id,
        "callback_query": {
            "id": cb_id,
            "from": {"id": user_id, "is_bot": False, "first_name": f"User{user_id}"},
            "chat_instance": "test",
            "message": {
                "message_id": 10,
                "date": 0,
                "chat": {"id": chat_id, "type": "private"},
            },
            "data": data,
        },
    }
