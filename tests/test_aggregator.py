"""
Tests for fan-out, merge, dedup and ranking.
"""

import asyncio

import pytest

from trendcache.models.article import FetchResult, FetchStatus
from trendcache.services.aggregator import TrendsAggregator, merge_results
from trendcache.services.sources import RSSFeedAdapter
from conftest import StubAdapter, make_article, make_settings

FAST_FEED = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Fast</title>
  <item><title>Growth strategy for startups</title><link>https://fast.example.com/1</link></item>
</channel></rss>
"""


def _result(*articles, source="stub", topic="business"):
    return FetchResult.success(source, topic, list(articles))


class TestMergeResults:

    def test_dedup_keeps_first_occurrence(self):
        first = make_article("Same title", topic="business", source="a")
        second = make_article("Same title", topic="technology", source="b")
        corpus = merge_results([_result(first), _result(second)], 50)
        assert corpus == (first,)

    def test_dedup_is_case_sensitive(self):
        corpus = merge_results([_result(make_article("Growth"), make_article("growth"))], 50)
        assert [a.title for a in corpus] == ["Growth", "growth"]

    def test_untitled_articles_dropped(self):
        corpus = merge_results([_result(make_article(""), make_article("   "), make_article("Kept"))], 50)
        assert [a.title for a in corpus] == ["Kept"]

    def test_sorted_by_score_with_stable_ties(self):
        articles = [
            make_article("low", score=0),
            make_article("high-1", score=3),
            make_article("mid", score=1),
            make_article("high-2", score=3),
        ]
        corpus = merge_results([_result(*articles)], 50)
        assert [a.title for a in corpus] == ["high-1", "high-2", "mid", "low"]

    def test_truncated_to_max_size(self):
        articles = [make_article(f"Story {i}", score=i % 4) for i in range(80)]
        corpus = merge_results([_result(*articles)], 50)
        assert len(corpus) == 50
        scores = [a.relevance_score for a in corpus]
        assert scores == sorted(scores, reverse=True)
        assert len({a.title for a in corpus}) == len(corpus)

    def test_failed_results_contribute_nothing(self):
        failed = FetchResult.failure("stub", "business", "boom")
        corpus = merge_results([failed, _result(make_article("Only"))], 50)
        assert [a.title for a in corpus] == ["Only"]


@pytest.mark.asyncio
class TestTrendsAggregator:

    async def test_end_to_end_merge(self, settings):
        rss = StubAdapter("rss", ["Growth strategies for 2024", "Growth strategies for 2024", "Weather report"])
        headlines = StubAdapter("newsapi", ["AI in healthcare"])
        aggregator = TrendsAggregator([rss, headlines], settings)

        result = await aggregator.aggregate(["business", "technology"])
        titles = [a.title for a in result.articles]

        assert len(titles) == 3
        assert "AI in healthcare" in titles
        assert titles.index("Growth strategies for 2024") < titles.index("Weather report")
        assert rss.calls == ["business", "technology"]
        assert headlines.calls == ["business", "technology"]

    async def test_first_topic_tag_wins(self, settings):
        rss = StubAdapter("rss", ["Shared story"])
        result = await TrendsAggregator([rss], settings).aggregate(["finance", "marketing"])
        assert [a.topic for a in result.articles] == ["finance"]

    async def test_failure_is_isolated(self, settings):
        broken = StubAdapter("broken", error=RuntimeError("network down"))
        failing = StubAdapter("failing", fail=True)
        healthy = StubAdapter("healthy", ["Market update"])
        result = await TrendsAggregator([broken, failing, healthy], settings).aggregate(["business"])

        assert [a.title for a in result.articles] == ["Market update"]
        statuses = {r.source: r.status for r in result.results}
        assert statuses == {
            "broken": FetchStatus.FAILED,
            "failing": FetchStatus.FAILED,
            "healthy": FetchStatus.OK,
        }
        assert result.failed == 2
        assert result.succeeded == 1

    async def test_timeout_counts_as_failure(self):
        settings = make_settings(FETCH_TIMEOUT_SECONDS=0.05)
        slow = StubAdapter("slow", ["Never arrives"], delay=1.0)
        fast = StubAdapter("fast", ["Arrives"])
        result = await TrendsAggregator([slow, fast], settings).aggregate(["business"])

        assert [a.title for a in result.articles] == ["Arrives"]
        slow_result = next(r for r in result.results if r.source == "slow")
        assert slow_result.status is FetchStatus.FAILED
        assert "timed out" in slow_result.error

    async def test_total_failure_keeps_previous(self, settings):
        previous = (make_article("Old growth story"), make_article("Old weather"))
        failing = StubAdapter("rss", fail=True)
        result = await TrendsAggregator([failing], settings).aggregate(["business"], previous=previous)

        assert result.articles == previous
        assert result.used_previous is True

    async def test_total_failure_without_previous_is_empty(self, settings):
        failing = StubAdapter("rss", fail=True)
        result = await TrendsAggregator([failing], settings).aggregate(["business"])
        assert result.articles == ()
        assert result.used_previous is False

    async def test_partial_failure_replaces_previous(self, settings):
        previous = (make_article("Old story"),)
        adapters = [StubAdapter("rss", fail=True), StubAdapter("newsapi", ["Fresh story"])]
        result = await TrendsAggregator(adapters, settings).aggregate(["business"], previous=previous)
        assert [a.title for a in result.articles] == ["Fresh story"]
        assert result.used_previous is False

    async def test_corpus_capped(self):
        settings = make_settings(MAX_CORPUS_SIZE=5)
        rss = StubAdapter("rss", [f"Story {i}" for i in range(12)])
        result = await TrendsAggregator([rss], settings).aggregate(["business"])
        assert len(result.articles) == 5

    async def test_close_closes_adapters(self, settings):
        adapters = [StubAdapter("a"), StubAdapter("b")]
        await TrendsAggregator(adapters, settings).close()
        assert all(a.closed for a in adapters)

    async def test_hanging_feed_keeps_other_feed_of_topic(self):
        settings = make_settings(FETCH_TIMEOUT_SECONDS=1.0, ENDPOINT_TIMEOUT_SECONDS=0.05)
        adapter = RSSFeedAdapter(settings, feeds={
            "business": ["https://fast.example.com/rss", "https://slow.example.com/rss"],
        })

        async def download(url):
            if "slow" in url:
                await asyncio.sleep(5)
            return FAST_FEED

        adapter._download = download
        result = await TrendsAggregator([adapter], settings).aggregate(["business"])

        assert [a.title for a in result.articles] == ["Growth strategy for startups"]
        [rss_result] = result.results
        assert rss_result.status is FetchStatus.OK
