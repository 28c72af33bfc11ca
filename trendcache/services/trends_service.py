"""
Trends service facade.

Owns the cache, adapters, aggregator and refresh orchestrator for the
lifetime of the application and exposes the query/refresh operations
consumed by the API routes and the content-generation pipeline.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Sequence

from ..core.config import Settings
from ..utils.topics import normalize_topics, parse_limit, parse_topics_param
from .aggregator import TrendsAggregator
from .refresher import RefreshOrchestrator
from .sources import HeadlineAPIAdapter, RSSFeedAdapter
from .trends_cache import Clock, TrendsCache

logger = logging.getLogger(__name__)


class TrendsService:
    def __init__(self, settings: Settings, adapters: Sequence, clock: Optional[Clock] = None):
        self.settings = settings
        self.cache = TrendsCache(ttl=timedelta(minutes=settings.TRENDS_CACHE_TTL_MINUTES), clock=clock)
        self.aggregator = TrendsAggregator(adapters, settings)
        self.refresher = RefreshOrchestrator(self.cache, self.aggregator, settings)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrendsService":
        adapters = [RSSFeedAdapter(settings), HeadlineAPIAdapter(settings)]
        return cls(settings, adapters)

    def start(self) -> None:
        if self.settings.TRENDS_SCHEDULER_ENABLED:
            self.refresher.start()
            logger.info(
                f"Trends scheduler started (warm-up in {self.settings.TRENDS_WARMUP_DELAY_SECONDS}s, "
                f"every {self.settings.TRENDS_REFRESH_INTERVAL_MINUTES} min)"
            )
        else:
            logger.info("Trends scheduler disabled")

    async def close(self) -> None:
        await self.refresher.stop()
        await self.aggregator.close()

    def _topics(self, topics: Any) -> List[str]:
        return normalize_topics(topics, self.settings.DEFAULT_TOPICS)

    async def get_trends(self, topics: Optional[str] = None, limit: Any = None) -> Dict[str, Any]:
        """
        Serve trending articles for a comma-separated ``topics`` string.

        Refreshes first when the cache is stale.
        """
        requested = parse_topics_param(topics, self.settings.DEFAULT_TOPICS)
        count = parse_limit(limit)
        logger.info(f"Fetching trends for topics: {requested}")

        await self.refresher.ensure_fresh(requested)

        snapshot = self.cache.snapshot
        return {
            "trends": self.cache.read(requested, count),
            "lastUpdated": snapshot.last_updated,
            "totalArticles": len(snapshot.articles),
            "availableTopics": list(snapshot.topic_index.keys()),
        }

    async def refresh_trends(self, topics: Any = None) -> Dict[str, Any]:
        """Force a refresh for ``topics``; invalid or empty input uses the defaults."""
        requested = self._topics(topics)
        logger.info(f"Refreshing trends for validated topics: {requested}")
        articles = await self.refresher.refresh(requested)
        return {
            "success": True,
            "message": "Trends refreshed successfully",
            "articlesCount": len(articles),
            "lastUpdated": self.cache.last_updated,
            "topics": requested,
        }

    async def get_generation_context(self, topics: Any = None, limit: int = 3) -> Dict[str, Any]:
        """
        Render the top trending articles as a prompt context block.

        Failures are logged and produce an empty context; the generation
        pipeline never waits on an error from here.
        """
        try:
            requested = self._topics(topics)
            await self.refresher.ensure_fresh(requested)
            used = self.cache.read(requested, max(0, limit))
            return {"context": render_context(used), "used": used}
        except Exception as e:
            logger.error(f"Error fetching trends for generation: {e}")
            return {"context": "", "used": []}

    def status(self) -> Dict[str, Any]:
        age = self.cache.age()
        last = self.refresher.last_result
        return {
            "lastUpdated": self.cache.last_updated,
            "ageSeconds": age.total_seconds() if age is not None else None,
            "stale": self.cache.is_stale(),
            "refreshing": self.refresher.refreshing,
            "totalArticles": self.cache.total_articles,
            "availableTopics": self.cache.available_topics,
            "refreshCount": self.refresher.refresh_count,
            "enabledSources": self.aggregator.enabled_sources,
            "lastRefresh": None if last is None else {
                "succeeded": last.succeeded,
                "failed": last.failed,
                "fetched": last.fetched_count,
                "keptPrevious": last.used_previous,
            },
        }


def render_context(articles: Sequence) -> str:
    if not articles:
        return ""
    blocks = [
        f"{index}. {article.title or 'No title'}\n   Summary: {article.summary or 'No summary'}"
        for index, article in enumerate(articles, start=1)
    ]
    return "CURRENT TRENDING TOPICS:\n" + "\n\n".join(blocks)
