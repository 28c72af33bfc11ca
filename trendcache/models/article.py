"""Domain objects shared by the adapters, the aggregator and the cache."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Article:
    """A normalized article.  ``title`` is the dedup identity key."""

    title: str
    summary: str
    link: str
    publish_date: datetime
    source: str
    topic: str
    relevance_score: int = 0
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "link": self.link,
            "publishDate": self.publish_date,
            "source": self.source,
            "topic": self.topic,
            "relevanceScore": self.relevance_score,
            "imageUrl": self.image_url,
        }


Corpus = Tuple[Article, ...]
TopicIndex = Dict[str, Tuple[Article, ...]]


class FetchStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"
    # Adapter family unavailable (missing credential, rate-limit cooldown).
    SKIPPED = "skipped"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one adapter call for one topic."""

    source: str
    topic: str
    status: FetchStatus
    articles: Tuple[Article, ...] = ()
    error: Optional[str] = None

    @classmethod
    def success(cls, source: str, topic: str, articles: List[Article]) -> "FetchResult":
        status = FetchStatus.OK if articles else FetchStatus.EMPTY
        return cls(source=source, topic=topic, status=status, articles=tuple(articles))

    @classmethod
    def failure(cls, source: str, topic: str, error: str) -> "FetchResult":
        return cls(source=source, topic=topic, status=FetchStatus.FAILED, error=error)

    @classmethod
    def skipped(cls, source: str, topic: str, reason: str) -> "FetchResult":
        return cls(source=source, topic=topic, status=FetchStatus.SKIPPED, error=reason)

    @property
    def ok(self) -> bool:
        return self.status in (FetchStatus.OK, FetchStatus.EMPTY)


@dataclass(frozen=True)
class CacheSnapshot:
    """Corpus, its topic index and build time; replaced as a unit."""

    articles: Corpus = ()
    topic_index: TopicIndex = field(default_factory=dict)
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class AggregationResult:
    articles: Corpus
    results: Tuple[FetchResult, ...] = ()
    used_previous: bool = False

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status is FetchStatus.FAILED)

    @property
    def fetched_count(self) -> int:
        return sum(len(r.articles) for r in self.results)
