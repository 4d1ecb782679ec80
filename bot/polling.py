"""Update loop — long polling and the legacy webhook entry point.

:func:`poll_updates` turns ``getUpdates`` into an async stream of raw
updates.  :class:`UpdateLoop` consumes any such stream and spawns one
:func:`asyncio.create_task` per update, so a slow backend call for one
event never blocks the next.  There is no ordering guarantee across events.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterable, AsyncIterator

import requests
from pydantic import ValidationError

from core.logger import AlertorLogger
from sdk.client import BotClient
from sdk.exceptions import APIException
from sdk.models import Update
from bot.dispatcher import EventRouter

logger = AlertorLogger.get_logger()

RawUpdate = dict[str, Any]


async def poll_updates(
    client: BotClient,
    timeout: int = 60,
    retry_delay: float = 3.0,
) -> AsyncIterator[RawUpdate]:
    """Yield raw updates from Telegram's long-poll endpoint, forever.

    Opening the stream removes any registered webhook, since Telegram
    refuses ``getUpdates`` while one is set; a failure there ends the stream
    with an error.  Network errors and rate-limit/server errors while
    polling are logged and retried after *retry_delay* seconds.  Any other
    API error (bad token, conflicting poller) ends the stream.
    """
    await asyncio.to_thread(client.delete_webhook)
    logger.info("Telegram Bot Polling Started", extra={"api_endpoint": "getUpdates", "poll_timeout": timeout})

    offset: int | None = None
    while True:
        try:
            data = await asyncio.to_thread(client.get_updates, offset, 100, timeout)
        except APIException as exc:
            if not exc.is_transient:
                raise
            logger.warning("getUpdates failed, retrying", extra={"api_endpoint": "getUpdates", "status_code": exc.status_code, "retry_in": retry_delay})
            await asyncio.sleep(retry_delay)
            continue
        except requests.RequestException as exc:
            logger.warning("getUpdates request error, retrying", extra={"api_endpoint": "getUpdates", "error": type(exc).__name__, "retry_in": retry_delay})
            await asyncio.sleep(retry_delay)
            continue

        updates = data.get("result", [])
        if updates:
            logger.debug("Received updates", extra={"count": len(updates)})
        for update in updates:
            offset = update["update_id"] + 1
            yield update


class UpdateLoop:
    """Consume an update stream and dispatch every update concurrently.

    *max_in_flight* of ``0`` means unbounded fan-out.  A positive value
    caps the number of running handler tasks; the loop then waits for a
    free slot before pulling the next update.
    """

    def __init__(
        self,
        router: EventRouter,
        source: AsyncIterable[RawUpdate | Update],
        max_in_flight: int = 0,
    ) -> None:
        self._router = router
        self._source = source
        self._slots = asyncio.Semaphore(max_in_flight) if max_in_flight > 0 else None
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def _handle(self, update: RawUpdate | Update) -> None:
        try:
            await self._router.process_update(update)
        except Exception:
            logger.exception("Update handling failed")
        finally:
            if self._slots is not None:
                self._slots.release()

    async def submit(self, update: RawUpdate | Update) -> asyncio.Task:
        """Start handling *update* in its own task and return the task.

        On a bounded loop this first waits for a free slot.
        """
        if self._slots is not None:
            await self._slots.acquire()
        task = asyncio.create_task(self._handle(update))
        # Keep a reference until done; the event loop only holds weak ones.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run(self) -> None:
        """Pull updates until the source ends or fails, then drain.

        A failing source is logged, not raised.  Tasks already spawned are
        awaited before returning; none are cancelled.
        """
        logger.info("Update loop running", extra={"bounded": self._slots is not None})
        try:
            async for update in self._source:
                await self.submit(update)
        except requests.RequestException as exc:
            logger.error("Telegram update stream failed", extra={"error": type(exc).__name__})
        except Exception:
            logger.exception("Telegram update stream failed")
        else:
            logger.info("Telegram update stream ended")
        await self.drain()

    async def drain(self) -> None:
        """Wait for every spawned task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))


async def handle_webhook_payload(loop: UpdateLoop, body: bytes | str) -> asyncio.Task | None:
    """Decode a webhook request body and dispatch it like a polled update.

    Kept for deployments that still register a webhook.  Undecodable
    payloads are logged and dropped.
    """
    try:
        update = Update.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("Telegram webhook payload rejected", extra={"error": str(exc)})
        return None
    return await loop.submit(update)
