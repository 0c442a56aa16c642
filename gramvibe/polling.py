from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, List, Optional

from .config import PollingConfig
from .log import get_logger
from .methods import GetUpdatesParams
from .types.update import Update

if TYPE_CHECKING:
    from .client import Bot

logger = get_logger("polling")


class Poller:
    """
    Long-polling loop of one polling session.

    `offset` is the cursor: the next update id to request. It is advanced to
    update_id + 1 before each update is handed to the dispatcher, and never
    moves backwards. Dispatches are fire-and-forget, so a failing or slow
    handler never holds back the next fetch (at-least-once delivery).
    """

    def __init__(self, bot: "Bot", config: PollingConfig):
        self.bot = bot
        self.config = config
        self.offset = 0

    async def run(self, stop: asyncio.Event) -> None:
        if self.config.drop_pending:
            await self._drop_pending()
        logger.info("Polling loop started")
        try:
            while not stop.is_set():
                params = GetUpdatesParams(
                    offset=self.offset,
                    limit=self.config.limit,
                    timeout=self.config.timeout,
                    allowed_updates=list(self.config.allowed_updates or []),
                )
                try:
                    updates = await self._fetch(params, stop)
                except Exception as e:
                    if stop.is_set():
                        break
                    logger.error("Failed to get updates: %s", e)
                    await self._backoff(stop)
                    continue
                if updates is None:
                    break
                for update in updates:
                    self.offset = max(self.offset, update.update_id + 1)
                    self.bot.dispatch(update)
        finally:
            logger.info("Polling loop stopped")

    async def _fetch(self, params: GetUpdatesParams, stop: asyncio.Event) -> Optional[List[Update]]:
        """One long-poll call; None when the stop signal arrives first."""
        fetch = asyncio.ensure_future(self.bot.get_updates(params))
        stopper = asyncio.ensure_future(stop.wait())
        try:
            done, _ = await asyncio.wait({fetch, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            if not fetch.done():
                fetch.cancel()
        if fetch in done:
            return fetch.result()
        return None

    async def _backoff(self, stop: asyncio.Event) -> None:
        try:
            await asyncio.wait_for(stop.wait(), timeout=self.bot.retry_delay)
        except asyncio.TimeoutError:
            pass

    async def _drop_pending(self) -> None:
        try:
            await self.bot.get_updates(GetUpdatesParams(offset=-1, limit=1, timeout=1))
        except Exception as e:
            logger.warning("Failed to drop pending updates: %s", e)
