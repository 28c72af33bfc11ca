"""
Refresh orchestration.

A refresh is aggregate + replace.  At most one refresh runs at a time: any
trigger that arrives while one is in flight awaits the same task and gets
its result instead of starting another fetch against upstream sources.
"""

import asyncio
import contextlib
import logging
from typing import List, Optional, Sequence

from ..core.config import Settings
from ..models.article import AggregationResult, Corpus
from .aggregator import TrendsAggregator
from .trends_cache import TrendsCache

logger = logging.getLogger(__name__)


class RefreshOrchestrator:
    def __init__(
        self,
        cache: TrendsCache,
        aggregator: TrendsAggregator,
        settings: Settings,
        interval: Optional[float] = None,
    ):
        self.cache = cache
        self.aggregator = aggregator
        self.settings = settings
        # Seconds between scheduled refreshes, after the warm-up.
        self.interval = settings.refresh_interval_seconds if interval is None else interval
        self.last_result: Optional[AggregationResult] = None
        self.refresh_count: int = 0
        self._inflight: Optional[asyncio.Task] = None
        self._background: Optional[asyncio.Task] = None

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def refresh(self, topics: Sequence[str]) -> Corpus:
        """
        Refresh the cache for ``topics`` regardless of staleness.

        Joins the in-flight refresh when there is one.
        """
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._run_refresh(list(topics)))
            self._inflight = task
        else:
            logger.info("Refresh already in flight; joining it")
        # Shield so a cancelled waiter does not cancel the refresh for others.
        return await asyncio.shield(task)

    async def ensure_fresh(self, topics: Sequence[str]) -> bool:
        """Refresh (or join a refresh) if the cache is stale.  Returns True if it did."""
        if not self.cache.is_stale():
            return False
        logger.info("Cache is stale or empty, updating...")
        await self.refresh(topics)
        return True

    async def _run_refresh(self, topics: List[str]) -> Corpus:
        logger.info(f"Starting trends cache update for topics: {topics}")
        result = await self.aggregator.aggregate(topics, previous=self.cache.articles)
        self.cache.replace(result.articles)
        self.last_result = result
        self.refresh_count += 1
        logger.info(
            f"Trends refresh done: {len(result.articles)} articles kept, "
            f"{result.fetched_count} fetched, {result.succeeded} calls ok, {result.failed} failed"
        )
        return result.articles

    def start(self) -> None:
        """Start the warm-up and scheduled refresh loop on the running event loop."""
        if self._background is not None and not self._background.done():
            return
        self._background = asyncio.create_task(self._scheduled_loop())

    async def stop(self) -> None:
        task, self._background = self._background, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        inflight = self._inflight
        if inflight is not None and not inflight.done():
            inflight.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await inflight

    async def _scheduled_loop(self) -> None:
        await asyncio.sleep(self.settings.TRENDS_WARMUP_DELAY_SECONDS)
        logger.info("Populating initial trends cache...")
        await self._background_refresh(self.settings.WARMUP_TOPICS, "Initial trends cache population")

        while True:
            await asyncio.sleep(self.interval)
            logger.info("Running scheduled trends update...")
            await self._background_refresh(self.settings.SCHEDULED_TOPICS, "Scheduled trends update")

    async def _background_refresh(self, topics: Sequence[str], label: str) -> None:
        try:
            await self.refresh(topics)
            logger.info(f"{label} completed")
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"{label} failed")
