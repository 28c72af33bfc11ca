"""
In-memory trends cache and staleness policy.

The cache holds a single immutable ``CacheSnapshot``.  ``replace`` builds a
new snapshot and swaps the reference, so readers always see a consistent
corpus/index pair without taking a lock.
"""

import logging
from dataclasses import replace as dc_replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional

from ..core.constants import NO_SUMMARY, SUMMARY_DISPLAY_LENGTH
from ..models.article import Article, CacheSnapshot, Corpus
from ..utils.text import truncate
from .topic_index import build_topic_index

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def matches_topic(article: Article, topic: str) -> bool:
    """
    Case-insensitive topic predicate.

    A topic matches when it equals or is a substring of the article's topic
    tag, title or summary.
    """
    needle = (topic or "").strip().lower()
    if not needle:
        return False
    for value in (article.topic, article.title, article.summary):
        if value and needle in value.lower():
            return True
    return False


def truncate_summary(summary: Optional[str], length: int = SUMMARY_DISPLAY_LENGTH) -> str:
    if not summary:
        return NO_SUMMARY
    return truncate(summary, length)


class TrendsCache:
    def __init__(self, ttl: timedelta = timedelta(minutes=30), clock: Optional[Clock] = None):
        self.ttl = ttl
        self._clock = clock or _utcnow
        self._snapshot = CacheSnapshot()

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    @property
    def articles(self) -> Corpus:
        return self._snapshot.articles

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._snapshot.last_updated

    @property
    def total_articles(self) -> int:
        return len(self._snapshot.articles)

    @property
    def available_topics(self) -> List[str]:
        return list(self._snapshot.topic_index.keys())

    def age(self) -> Optional[timedelta]:
        last_updated = self._snapshot.last_updated
        if last_updated is None:
            return None
        return self._clock() - last_updated

    def is_stale(self) -> bool:
        snapshot = self._snapshot
        if snapshot.last_updated is None or not snapshot.articles:
            return True
        return self._clock() - snapshot.last_updated > self.ttl

    def read(self, topics: Iterable[str], limit: int = 20) -> List[Article]:
        """
        Return up to ``limit`` corpus articles matching any of ``topics``.

        Corpus (rank) order is kept and summaries are truncated for
        display.  Never triggers a refresh.
        """
        topic_list = [t for t in topics if t]
        limit = max(0, limit)
        if limit == 0:
            return []
        matched: List[Article] = []
        for article in self._snapshot.articles:
            if any(matches_topic(article, topic) for topic in topic_list):
                matched.append(dc_replace(article, summary=truncate_summary(article.summary)))
                if len(matched) >= limit:
                    break
        return matched

    def replace(self, corpus: Iterable[Article]) -> CacheSnapshot:
        articles = tuple(corpus)
        snapshot = CacheSnapshot(
            articles=articles,
            topic_index=build_topic_index(articles),
            last_updated=self._clock(),
        )
        self._snapshot = snapshot
        logger.info(f"Trends cache updated with {len(articles)} articles")
        return snapshot
