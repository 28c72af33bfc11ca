"""
Tests for the cache store, staleness policy and topic index.
"""

from datetime import timedelta

from trendcache.services.topic_index import build_topic_index
from trendcache.services.trends_cache import TrendsCache, matches_topic, truncate_summary
from conftest import make_article


def _corpus():
    return (
        make_article("Tech giants bet on automation", topic="technology", score=3),
        make_article("Quarterly market outlook", summary="Analysts on technology stocks", topic="business", score=2),
        make_article("New gadget review", topic="technology", score=1),
        make_article("Weather report", topic="general", score=0),
    )


class TestStaleness:

    def test_stale_at_startup(self, clock):
        cache = TrendsCache(clock=clock)
        assert cache.last_updated is None
        assert cache.is_stale()

    def test_fresh_after_replace(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        assert not cache.is_stale()
        assert cache.last_updated == clock()

    def test_stale_after_ttl(self, clock):
        cache = TrendsCache(ttl=timedelta(minutes=30), clock=clock)
        cache.replace(_corpus())
        clock.advance(minutes=30)
        assert not cache.is_stale()
        clock.advance(seconds=1)
        assert cache.is_stale()

    def test_empty_corpus_is_stale(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(())
        assert cache.last_updated is not None
        assert cache.is_stale()

    def test_age(self, clock):
        cache = TrendsCache(clock=clock)
        assert cache.age() is None
        cache.replace(_corpus())
        clock.advance(minutes=5)
        assert cache.age() == timedelta(minutes=5)


class TestReplace:

    def test_snapshot_is_swapped_whole(self, clock):
        cache = TrendsCache(clock=clock)
        before = cache.snapshot
        corpus = _corpus()
        after = cache.replace(corpus)

        assert before.articles == ()
        assert before.last_updated is None
        assert after is cache.snapshot
        assert after.articles == corpus
        assert set(after.topic_index) == {"technology", "business", "general"}

    def test_replace_copies_input(self, clock):
        cache = TrendsCache(clock=clock)
        corpus = list(_corpus())
        cache.replace(corpus)
        corpus.clear()
        assert cache.total_articles == 4

    def test_available_topics_in_first_appearance_order(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        assert cache.available_topics == ["technology", "business", "general"]


class TestRead:

    def test_limit_and_match(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        results = cache.read(["technology"], 5)

        assert len(results) <= 5
        assert [a.title for a in results] == [
            "Tech giants bet on automation",
            "Quarterly market outlook",
            "New gadget review",
        ]
        for article in results:
            assert matches_topic(article, "technology")

    def test_limit_truncates(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        assert len(cache.read(["technology"], 1)) == 1

    def test_zero_and_negative_limit(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        assert cache.read(["technology"], 0) == []
        assert cache.read(["technology"], -4) == []

    def test_title_match_case_insensitive(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        assert [a.title for a in cache.read(["WEATHER"], 20)] == ["Weather report"]

    def test_multiple_topics_keep_rank_order(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        titles = [a.title for a in cache.read(["general", "business"], 20)]
        assert titles == ["Quarterly market outlook", "Weather report"]

    def test_no_match(self, clock):
        cache = TrendsCache(clock=clock)
        cache.replace(_corpus())
        assert cache.read(["sports"], 20) == []

    def test_summary_truncated_for_display(self, clock):
        cache = TrendsCache(clock=clock)
        long_summary = "technology " * 40
        cache.replace((make_article("Long one", summary=long_summary, topic="technology"),))

        [article] = cache.read(["technology"], 20)
        assert article.summary == long_summary[:150] + "..."
        assert cache.articles[0].summary == long_summary

    def test_read_does_not_refresh(self, clock):
        cache = TrendsCache(clock=clock)
        assert cache.read(["technology"], 20) == []
        assert cache.is_stale()


class TestMatchesTopic:

    def test_topic_tag_substring(self):
        assert matches_topic(make_article("x", topic="fintech"), "tech")

    def test_summary_match(self):
        assert matches_topic(make_article("x", summary="About Marketing"), "marketing")

    def test_blank_topic_never_matches(self):
        assert not matches_topic(make_article("x"), "  ")


class TestTruncateSummary:

    def test_short_summary_unchanged(self):
        assert truncate_summary("short") == "short"

    def test_exactly_150_unchanged(self):
        text = "a" * 150
        assert truncate_summary(text) == text

    def test_long_summary_gets_marker(self):
        assert truncate_summary("a" * 151) == "a" * 150 + "..."

    def test_missing_summary(self):
        assert truncate_summary("") == "No summary available"


class TestBuildTopicIndex:

    def test_groups_preserve_order(self):
        corpus = _corpus()
        index = build_topic_index(corpus)
        assert list(index) == ["technology", "business", "general"]
        assert index["technology"] == (corpus[0], corpus[2])

    def test_empty(self):
        assert build_topic_index(()) == {}
