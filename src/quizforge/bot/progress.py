"""Progress reporter that mirrors extraction status into one Telegram message."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from telegram.error import TelegramError


logger = logging.getLogger(__name__)


class StatusMessageReporter:
    """Edit a status message with the latest progress text.

    Calls are synchronous and cheap; edits happen in a background task that
    only ever shows the most recent text, so bursts of updates from parallel
    OCR pages collapse into a few edits. Must be called on the event loop.
    """

    def __init__(
        self,
        status_message: Any,
        *,
        min_interval_seconds: float = 1.0,
        current_text: str | None = None,
    ) -> None:
        self._message = status_message
        self._min_interval_seconds = min_interval_seconds
        self._latest: str | None = None
        self._shown: str | None = current_text
        self._task: asyncio.Task[None] | None = None

    @property
    def latest(self) -> str | None:
        return self._latest

    def __call__(self, text: str) -> None:
        self._latest = text
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._latest is not None and self._latest != self._shown:
            text = self._latest
            try:
                await self._message.edit_text(text)
            except TelegramError as error:
                logger.debug("Status update skipped: %s", error)
            self._shown = text
            if self._min_interval_seconds:
                await asyncio.sleep(self._min_interval_seconds)

    async def flush(self) -> None:
        """Wait until pending edits are done."""
        if self._task is not None:
            await self._task
