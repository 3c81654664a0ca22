"""
Shared knowledge-base snapshot, primed at startup and refreshed in the background
"""

import asyncio
import time
from typing import Callable, Optional

import structlog

from ..config import config
from ..interfaces.providers import KnowledgeProviderInterface
from ..types import ScrapedKnowledgeBase
from .knowledge_scraper import KnowledgeScraper


logger = structlog.get_logger(__name__)


class KnowledgePreloader(KnowledgeProviderInterface):
    """
    Holds the most recent knowledge base so requests rarely pay the scrape cost.

    The background loop wakes every interval and primes again when there is
    no snapshot, when the snapshot is the static fallback, or when it is
    older than max_age.
    """

    def __init__(
        self,
        scraper: KnowledgeScraper,
        interval: Optional[float] = None,
        max_age: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.scraper = scraper
        self.interval = interval or config.scraper.preload_interval
        self.max_age = max_age or config.scraper.cache_ttl
        self.clock = clock

        self._snapshot: Optional[ScrapedKnowledgeBase] = None
        self._primed_at: Optional[float] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def snapshot(self) -> Optional[ScrapedKnowledgeBase]:
        return self._snapshot

    @property
    def state(self) -> str:
        """live, fallback or not_loaded"""
        if self._snapshot is None:
            return "not_loaded"
        return "fallback" if self._snapshot.is_fallback else "live"

    def needs_refresh(self) -> bool:
        if self._snapshot is None or self._snapshot.is_fallback:
            return True
        return self.clock() - self._primed_at >= self.max_age

    async def prime(self) -> Optional[ScrapedKnowledgeBase]:
        """Fetch the knowledge base and keep it as the current snapshot"""
        try:
            knowledge_base = await self.scraper.get_knowledge_base()
        except Exception as e:
            logger.error("Knowledge preload failed", error=str(e))
            return self._snapshot

        self._snapshot = knowledge_base
        self._primed_at = self.clock()
        logger.info("Knowledge base preloaded", is_fallback=knowledge_base.is_fallback)
        return knowledge_base

    async def get_knowledge_base(self) -> Optional[ScrapedKnowledgeBase]:
        """
        Current snapshot, stale or fallback included.

        Only the very first request before any snapshot exists waits for a
        fetch. Refreshing is left to the background loop.
        """
        if self._snapshot is not None:
            return self._snapshot
        return await self.prime()

    async def _run(self):
        await self.prime()
        while True:
            await asyncio.sleep(self.interval)
            if self.needs_refresh():
                logger.debug("Refreshing knowledge snapshot", state=self.state)
                await self.prime()

    def start(self):
        """Prime now and keep refreshing until stop() is awaited"""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
