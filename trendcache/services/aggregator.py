"""
Multi-source fan-out, merge and ranking.

``TrendsAggregator.aggregate`` calls every adapter for every topic
concurrently, isolates failures per call and folds the tagged results into
a deduplicated, score-ranked, capped corpus.
"""

import asyncio
import logging
from typing import Iterable, List, Sequence

from ..core.config import Settings
from ..models.article import AggregationResult, Article, Corpus, FetchResult, FetchStatus

logger = logging.getLogger(__name__)


def merge_results(results: Iterable[FetchResult], max_size: int) -> Corpus:
    """
    Fold fetch results into a corpus.

    Articles are concatenated in result order, untitled articles are
    dropped, titles are deduplicated (exact match, first occurrence wins),
    the remainder is stably sorted by descending relevance score and
    truncated to ``max_size``.
    """
    seen_titles = set()
    merged: List[Article] = []
    for result in results:
        for article in result.articles:
            title = article.title
            if not title or not title.strip():
                continue
            if title in seen_titles:
                continue
            seen_titles.add(title)
            merged.append(article)
    merged.sort(key=lambda a: a.relevance_score, reverse=True)
    return tuple(merged[: max(0, max_size)])


class TrendsAggregator:
    def __init__(self, adapters: Sequence, settings: Settings):
        self.adapters = list(adapters)
        self.settings = settings

    async def aggregate(self, topics: Sequence[str], previous: Corpus = ()) -> AggregationResult:
        """
        Fetch ``topics`` from every adapter and build a new corpus.

        When no call yields a single article, ``previous`` is returned
        unchanged (if it is non-empty) so a total upstream outage never
        wipes a usable cache.
        """
        semaphore = asyncio.Semaphore(max(1, self.settings.MAX_CONCURRENT_FETCHES))
        calls = [(adapter, topic) for adapter in self.adapters for topic in topics]
        logger.info(f"Aggregating {len(topics)} topics across {len(self.adapters)} sources ({len(calls)} calls)")

        results = await asyncio.gather(
            *(self._fetch_one(semaphore, adapter, topic) for adapter, topic in calls)
        )

        for result in results:
            if result.status is FetchStatus.FAILED:
                logger.warning(f"Source {result.source} failed for topic '{result.topic}': {result.error}")

        corpus = merge_results(results, self.settings.MAX_CORPUS_SIZE)
        if not corpus and previous:
            logger.warning("No articles fetched from any source; keeping the previous corpus")
            return AggregationResult(articles=tuple(previous), results=tuple(results), used_previous=True)

        return AggregationResult(articles=corpus, results=tuple(results))

    async def _fetch_one(self, semaphore: asyncio.Semaphore, adapter, topic: str) -> FetchResult:
        name = getattr(adapter, "name", type(adapter).__name__)
        async with semaphore:
            try:
                return await asyncio.wait_for(adapter.fetch(topic), timeout=self.settings.FETCH_TIMEOUT_SECONDS)
            except asyncio.TimeoutError:
                return FetchResult.failure(name, topic, f"timed out after {self.settings.FETCH_TIMEOUT_SECONDS}s")
            except Exception as e:
                logger.exception(f"Unexpected error from source {name} for topic '{topic}'")
                return FetchResult.failure(name, topic, repr(e))

    async def close(self) -> None:
        for adapter in self.adapters:
            close = getattr(adapter, "close", None)
            if close is not None:
                await close()

    @property
    def enabled_sources(self) -> List[str]:
        return [getattr(a, "name", type(a).__name__) for a in self.adapters if getattr(a, "enabled", True)]
