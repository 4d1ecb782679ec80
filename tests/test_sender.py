"""Tests for text splitting and MessageSender delivery."""

import os
import sys

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.sender import (
    HIDE_KEYBOARD_TEXT,
    KEYBOARD_LABELS,
    SHOW_KEYBOARD_TEXT,
    TELEGRAM_MAX_MESSAGE_LENGTH,
    MessageSender,
    split_text,
)
from conftest import FakeClient


def _utf16_units(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


# ── split_text ───────────────────────────────────────────────────────────────


class TestSplitText:
    """Validate chunking under the Telegram length limit."""

    @pytest.mark.parametrize(
        "text",
        [
            pytest.param("hello world", id="short_text"),
            pytest.param("line1\nline2", id="multi_line"),
            pytest.param("a" * 4096, id="exactly_4096_chars"),
        ],
    )
    def test_short_text_is_one_chunk(self, text: str) -> None:
        assert split_text(text) == [text]

    def test_empty_text_has_no_chunks(self) -> None:
        assert split_text("") == []

    def test_cuts_at_last_line_break_within_limit(self) -> None:
        line = "x" * 2000
        text = f"{line}\n{line}\n{line}"
        chunks = split_text(text)
        assert chunks == [f"{line}\n{line}", line]

    def test_line_break_exactly_at_limit(self) -> None:
        text = "a" * 4096 + "\n" + "b" * 10
        assert split_text(text) == ["a" * 4096, "b" * 10]

    def test_hard_cut_without_line_break(self) -> None:
        chunks = split_text("a" * 8193)
        assert [len(c) for c in chunks] == [4096, 4096, 1]

    def test_custom_max_length(self) -> None:
        assert split_text("aaaa\nbbbb\ncccc", max_length=10) == ["aaaa\nbbbb", "cccc"]

    def test_long_line_after_short_line(self) -> None:
        text = "short\n" + "x" * 60
        assert split_text(text, max_length=50) == ["short", "x" * 50, "x" * 10]

    def test_round_trip_restores_text(self) -> None:
        lines = [f"line-{i:04d} " + "x" * (i % 70) for i in range(300)]
        text = "\n".join(lines)
        chunks = split_text(text, max_length=200)
        assert all(len(chunk) <= 200 for chunk in chunks)
        assert "\n".join(chunks) == text

    def test_default_limit(self) -> None:
        assert TELEGRAM_MAX_MESSAGE_LENGTH == 4096

    def test_emoji_counted_as_two_units(self) -> None:
        text = "\U0001F600" * 5000
        chunks = split_text(text)
        assert [_utf16_units(c) for c in chunks] == [4096, 4096, 1808]
        assert "".join(chunks) == text

    def test_hard_cut_never_splits_a_surrogate_pair(self) -> None:
        text = "a" + "\U0001F600" * 3
        assert split_text(text, max_length=4) == ["a\U0001F600", "\U0001F600\U0001F600"]

    def test_mixed_text_prefers_line_breaks(self) -> None:
        line = "\u770b\u677f \U0001F525" * 300
        text = "\n".join([line] * 5)
        chunks = split_text(text)
        assert all(_utf16_units(c) <= 4096 for c in chunks)
        assert all(c == line or "\n" in c for c in chunks)
        assert "\n".join(chunks) == text


# ── MessageSender ────────────────────────────────────────────────────────────


class TestMessageSender:
    """Validate ordered, failure-tolerant delivery."""

    @pytest.mark.asyncio
    async def test_empty_text_sends_nothing(self, client) -> None:
        assert await MessageSender(client).send(1, "") == 0
        assert client.sent == []

    @pytest.mark.asyncio
    async def test_chunks_sent_in_order_without_preview(self, client) -> None:
        sender = MessageSender(client, max_length=10)
        delivered = await sender.send(7, "aaaa\nbbbb\ncccc\ndddd")
        assert delivered == 2
        assert [m["text"] for m in client.sent] == ["aaaa\nbbbb", "cccc\ndddd"]
        assert all(m["chat_id"] == 7 for m in client.sent)
        assert all(m["disable_web_page_preview"] is True for m in client.sent)

    @pytest.mark.asyncio
    async def test_failed_chunk_does_not_abort_the_rest(self) -> None:
        client = FakeClient(fail_on={0})
        sender = MessageSender(client, max_length=4)
        delivered = await sender.send(7, "aaaa\nbbbb\ncccc")
        assert delivered == 2
        assert [m["text"] for m in client.sent] == ["bbbb", "cccc"]

    @pytest.mark.asyncio
    async def test_network_error_is_logged_not_raised(self) -> None:
        class OfflineClient(FakeClient):
            def send_message(self, chat_id, text, **options):
                raise requests.ConnectionError("offline")

        assert await MessageSender(OfflineClient()).send(7, "hello") == 0

    @pytest.mark.asyncio
    async def test_not_ok_body_counts_as_failure(self) -> None:
        class RefusingClient(FakeClient):
            def send_message(self, chat_id, text, **options):
                return {"ok": False, "description": "nope"}

        assert await MessageSender(RefusingClient()).send_interactive(7, "hi", {"inline_keyboard": []}) is False

    @pytest.mark.asyncio
    async def test_blank_chunk_skipped(self, client) -> None:
        sender = MessageSender(client, max_length=4)
        await sender.send(7, "aaaa\n\nbbbb")
        assert [m["text"] for m in client.sent] == ["aaaa", "bbbb"]

    @pytest.mark.asyncio
    async def test_send_interactive_attaches_markup(self, client) -> None:
        markup = {"inline_keyboard": [[{"text": "是", "callback_data": "x"}]]}
        assert await MessageSender(client).send_interactive(3, "確定？", markup) is True
        assert client.sent == [{"chat_id": 3, "text": "確定？", "reply_markup": markup}]

    @pytest.mark.asyncio
    async def test_show_keyboard(self, client) -> None:
        await MessageSender(client).send_keyboard_control(3, show=True)
        sent = client.sent[0]
        assert sent["text"] == SHOW_KEYBOARD_TEXT
        labels = [button["text"] for button in sent["reply_markup"]["keyboard"][0]]
        assert labels == list(KEYBOARD_LABELS)
        assert sent["reply_markup"]["resize_keyboard"] is True

    @pytest.mark.asyncio
    async def test_hide_keyboard(self, client) -> None:
        await MessageSender(client).send_keyboard_control(3, show=False)
        sent = client.sent[0]
        assert sent["text"] == HIDE_KEYBOARD_TEXT
        assert sent["reply_markup"] == {"remove_keyboard": True}

    @pytest.mark.asyncio
    async def test_answer_callback(self, client) -> None:
        await MessageSender(client).answer_callback("cb1")
        await MessageSender(client).answer_callback("")
        assert client.answered == ["cb1"]


# ── Log hygiene ──────────────────────────────────────────────────────────────


class TestTokenNotLogged:
    """Request errors embed the bot URL; only their type reaches the log."""

    _url = "https://api.telegram.org/bot123:SECRET/sendMessage"

    @pytest.mark.asyncio
    async def test_send_request_error(self, caplog) -> None:
        url = self._url

        class OfflineClient(FakeClient):
            def send_message(self, chat_id, text, **options):
                raise requests.ConnectionError(f"Max retries exceeded with url: {url}")

        assert await MessageSender(OfflineClient()).send(7, "hello") == 0
        failures = [r for r in caplog.records if r.getMessage() == "Telegram Send Message Failed"]
        assert failures[0].error == "ConnectionError"
        assert all("SECRET" not in str(vars(r)) for r in caplog.records)

    @pytest.mark.asyncio
    async def test_answer_callback_request_error(self, caplog) -> None:
        url = self._url

        class OfflineClient(FakeClient):
            def answer_callback_query(self, callback_query_id, text=None):
                raise requests.Timeout(f"Read timed out. (url: {url})")

        await MessageSender(OfflineClient()).answer_callback("cb1")
        failures = [r for r in caplog.records if r.getMessage() == "answerCallbackQuery failed"]
        assert failures[0].error == "Timeout"
        assert all("SECRET" not in str(vars(r)) for r in caplog.records)
