"""Long-polling update delivery."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from spacybot.errors import TelegramAPIError
from spacybot.telegram.base import BotClient

LOGGER = logging.getLogger(__name__)


class UpdatePoller:
    """Fetches updates with getUpdates and dispatches each on its own task."""

    def __init__(
        self,
        client: BotClient,
        handler: Callable[[dict[str, Any]], Awaitable[None]],
        poll_timeout_seconds: int = 50,
        retry_interval_seconds: float = 5.0,
    ) -> None:
        self._client = client
        self._handler = handler
        self._poll_timeout_seconds = poll_timeout_seconds
        self._retry_interval_seconds = retry_interval_seconds
        self._stop_event = asyncio.Event()
        self._offset: int | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def offset(self) -> int | None:
        return self._offset

    async def run_forever(self) -> None:
        """Poll until stop() is called or the task is cancelled."""

        try:
            while not self._stop_event.is_set():
                try:
                    updates = await self._client.get_updates(self._offset, self._poll_timeout_seconds)
                except (httpx.HTTPError, TelegramAPIError) as exc:
                    LOGGER.warning(
                        "getUpdates failed, retrying in %ss: %s", self._retry_interval_seconds, exc
                    )
                    await asyncio.sleep(self._retry_interval_seconds)
                    continue
                for update in updates:
                    self._dispatch(update)
        finally:
            for task in list(self._tasks):
                task.cancel()

    def stop(self) -> None:
        """Signal the loop to stop."""

        self._stop_event.set()

    def _dispatch(self, update: dict[str, Any]) -> None:
        if not isinstance(update, dict):
            LOGGER.debug("Skipping malformed update: %r", update)
            return
        update_id = update.get("update_id")
        if isinstance(update_id, int):
            self._offset = update_id + 1
        task = asyncio.create_task(self._handler(update), name=f"update-{update_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
