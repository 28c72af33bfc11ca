"""
Pytest configuration and shared fixtures.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from trendcache.core.config import Settings
from trendcache.models.article import Article, FetchResult
from trendcache.services.scoring import calculate_relevance_score

START = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)


def make_settings(**overrides):
    """Settings isolated from the environment running the tests."""
    values = dict(
        ENVIRONMENT="test",
        NEWS_API_KEY=None,
        NEWS_API_KEY_1=None,
        NEWS_API_KEY_2=None,
        NEWS_API_COUNTRY="us",
        NEWS_API_PAGE_SIZE=20,
        TRENDS_CACHE_TTL_MINUTES=30,
        TRENDS_REFRESH_INTERVAL_MINUTES=30,
        MAX_CORPUS_SIZE=50,
        FEEDS_PER_TOPIC=2,
        RSS_ITEMS_PER_FEED=10,
        MAX_ARTICLES_PER_FETCH=20,
        MAX_CONCURRENT_FETCHES=8,
        TRENDS_SCHEDULER_ENABLED=False,
        TRENDS_WARMUP_DELAY_SECONDS=0.0,
        FETCH_TIMEOUT_SECONDS=1.0,
        ENDPOINT_TIMEOUT_SECONDS=0.5,
        DEFAULT_TOPICS=["business", "technology"],
        SCHEDULED_TOPICS=["business", "technology", "marketing", "finance"],
        WARMUP_TOPICS=["business", "technology", "marketing"],
    )
    values.update(overrides)
    return Settings(**values)


def make_article(title, summary="", topic="business", source="example.com", score=None, link=None):
    return Article(
        title=title,
        summary=summary,
        link=link or f"https://example.com/{abs(hash(title))}",
        publish_date=START,
        source=source,
        topic=topic,
        relevance_score=calculate_relevance_score(title, summary) if score is None else score,
    )


class FakeClock:
    """Manually advanced clock for staleness tests."""

    def __init__(self, start=START):
        self.current = start

    def __call__(self):
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class StubAdapter:
    """
    In-memory source adapter.

    Returns the same titles for every topic, tagged with that topic.
    ``fail`` reports a FAILED result, ``error`` raises from ``fetch`` and
    ``delay`` sleeps before answering.
    """

    def __init__(self, name, titles=(), fail=False, error=None, delay=0.0, summaries=None):
        self.name = name
        self.enabled = True
        self.titles = list(titles)
        self.summaries = summaries or {}
        self.fail = fail
        self.error = error
        self.delay = delay
        self.calls = []
        self.closed = False

    async def fetch(self, topic):
        self.calls.append(topic)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.fail:
            return FetchResult.failure(self.name, topic, "stub failure")
        articles = [
            make_article(title, summary=self.summaries.get(title, ""), topic=topic, source=self.name)
            for title in self.titles
        ]
        return FetchResult.success(self.name, topic, articles)

    async def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def clock():
    return FakeClock()
