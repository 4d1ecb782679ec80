"""BotClient -- service layer wrapping the Telegram Bot API endpoints the channel uses.

HTTP calls use the ``requests`` library per project standards.  Methods are
synchronous; the bot layer offloads them with :func:`asyncio.to_thread` so
the event loop is never blocked.

One client is constructed at process start and shared by every concurrently
running task.  It holds no mutable state after construction and each call is
an independent request, so sharing it is safe.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import requests

from sdk.exceptions import APIException


class BotClient:
    """Client-side service layer for the Telegram Bot API.

    Each public method corresponds to a Telegram Bot API endpoint and
    returns the decoded JSON body.  Non-2xx status codes raise
    :class:`APIException`.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(self, base_url: str, timeout: int = _DEFAULT_TIMEOUT) -> None:
        """Create a new client bound to *base_url*.

        Args:
            base_url: Full Bot API base URL (e.g. ``https://api.telegram.org/bot<token>``).
            timeout: Default request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _post(
        self,
        endpoint: str,
        payload: Optional[Dict[str, Any]] = None,
        request_timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Send a POST request and return the parsed JSON body.

        Raises:
            APIException: If the response status code is not 2xx.
            requests.RequestException: On transport-level failures.
        """
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        response = requests.post(url, json=payload, timeout=request_timeout or self._timeout)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok:
            raise APIException(response.status_code, body)
        return body

    # ------------------------------------------------------------------
    #  Endpoints
    # ------------------------------------------------------------------

    def get_me(self) -> Dict[str, Any]:
        """A simple method for testing your bot's auth token. Returns basic information about the bot in form of a [User](https://core.telegram.org/bots/api/#user) object."""
        return self._post("getMe")

    def get_updates(self, offset: Optional[int] = None, limit: Optional[int] = 100, timeout: Optional[int] = 0, allowed_updates: Optional[List[str]] = None) -> Dict[str, Any]:
        """Use this method to receive incoming updates using long polling.

        The HTTP timeout is stretched by the long-poll *timeout* so the
        server can hold the request open without tripping ``requests``.
        """
        payload: Dict[str, Any] = {}
        if offset is not None:
            payload["offset"] = offset
        if limit is not None:
            payload["limit"] = limit
        if timeout is not None:
            payload["timeout"] = timeout
        if allowed_updates is not None:
            payload["allowed_updates"] = allowed_updates
        return self._post("getUpdates", payload, request_timeout=(timeout or 0) + self._timeout)

    def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> Dict[str, Any]:
        """Use this method to remove webhook integration if you decide to switch back to [getUpdates](https://core.telegram.org/bots/api/#getupdates). Returns *True* on success."""
        payload: Dict[str, Any] = {}
        if drop_pending_updates is not None:
            payload["drop_pending_updates"] = drop_pending_updates
        return self._post("deleteWebhook", payload)

    def send_message(self, chat_id: Union[int, str], text: str, parse_mode: Optional[str] = None, disable_web_page_preview: Optional[bool] = None, disable_notification: Optional[bool] = None, reply_markup: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Use this method to send text messages. On success, the sent [Message](https://core.telegram.org/bots/api/#message) is returned."""
        payload: Dict[str, Any] = {}
        payload["chat_id"] = chat_id
        payload["text"] = text
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if disable_web_page_preview is not None:
            payload["disable_web_page_preview"] = disable_web_page_preview
        if disable_notification is not None:
            payload["disable_notification"] = disable_notification
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self._post("sendMessage", payload)

    def answer_callback_query(self, callback_query_id: str, text: Optional[str] = None, show_alert: Optional[bool] = None) -> Dict[str, Any]:
        """Use this method to send answers to callback queries sent from inline keyboards. The answer will be displayed to the user as a notification at the top of the chat screen or as an alert."""
        payload: Dict[str, Any] = {}
        payload["callback_query_id"] = callback_query_id
        if text is not None:
            payload["text"] = text
        if show_alert is not None:
            payload["show_alert"] = show_alert
        return self._post("answerCallbackQuery", payload)
