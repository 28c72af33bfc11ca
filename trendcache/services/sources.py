"""
Source adapters.

Each adapter turns a topic into a tagged ``FetchResult`` holding a bounded
list of normalized, scored ``Article`` objects.  Adapters never raise: every
network or parse failure is caught, logged and reported as a ``FAILED``
result so the aggregator can merge outcomes uniformly.
"""

import asyncio
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import aiohttp
import feedparser

from ..core.config import Settings
from ..core.constants import (
    FALLBACK_FEED_TOPIC,
    NEWSAPI_CATEGORIES,
    NEWSAPI_TOP_HEADLINES_URL,
    NO_SUMMARY,
    RSS_CONTENT_SNIPPET_LENGTH,
    RSS_FEEDS,
    USER_AGENT,
)
from ..models.article import Article, FetchResult
from ..utils.text import source_from_url, strip_html
from .scoring import calculate_relevance_score

logger = logging.getLogger(__name__)


class SourceFetchError(Exception):
    """Raised inside an adapter when a single endpoint cannot be used."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def newest_first(articles: List[Article]) -> List[Article]:
    """Order articles by publish date, newest first (stable for equal dates)."""
    return sorted(articles, key=lambda a: a.publish_date, reverse=True)


def topic_to_category(topic: str) -> Optional[str]:
    """
    Map a free-form topic to a NewsAPI category using keyword heuristics.

    Returns ``None`` when no category matches.  If the topic matches several
    categories, the first one in ``NEWSAPI_CATEGORIES`` order wins.
    """
    topic_lower = topic.lower().strip()
    for category, keywords in NEWSAPI_CATEGORIES.items():
        for keyword in keywords:
            if re.search(rf"\b{re.escape(keyword)}\b", topic_lower):
                return category
    return None


class SourceAdapter:
    """
    Base class for source adapters.

    Subclasses implement ``_fetch_impl``.  ``fetch`` guarantees the
    never-raise contract by converting any escaped exception into a
    ``FAILED`` result.
    """

    name: str = "base"

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        self.settings = settings
        self.session = session
        self._owns_session = session is None

    @property
    def enabled(self) -> bool:
        return True

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    @property
    def request_timeout(self) -> aiohttp.ClientTimeout:
        return aiohttp.ClientTimeout(total=self.settings.ENDPOINT_TIMEOUT_SECONDS)

    async def fetch(self, topic: str) -> FetchResult:
        try:
            return await self._fetch_impl(topic)
        except Exception as e:
            logger.exception(f"Adapter {self.name} failed for topic '{topic}': {e}")
            return FetchResult.failure(self.name, topic, str(e))

    async def _fetch_impl(self, topic: str) -> FetchResult:
        raise NotImplementedError

    def _make_article(
        self,
        *,
        title: str,
        summary: str,
        link: str,
        publish_date: datetime,
        source: str,
        topic: str,
        image_url: Optional[str] = None,
    ) -> Article:
        return Article(
            title=title,
            summary=summary,
            link=link,
            publish_date=publish_date,
            source=source,
            topic=topic,
            relevance_score=calculate_relevance_score(title, summary),
            image_url=image_url,
        )


class RSSFeedAdapter(SourceAdapter):
    """
    Syndication-feed adapter.

    Topics map to a static list of feed URLs (``RSS_FEEDS``), falling back
    to the ``general`` feeds for unknown topics.  Only the first
    ``FEEDS_PER_TOPIC`` feeds are queried, concurrently.
    """

    name = "rss"

    def __init__(
        self,
        settings: Settings,
        session: Optional[aiohttp.ClientSession] = None,
        feeds: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(settings, session)
        self.feeds = feeds if feeds is not None else RSS_FEEDS

    def feeds_for_topic(self, topic: str) -> List[str]:
        urls = self.feeds.get(topic.lower()) or self.feeds.get(FALLBACK_FEED_TOPIC, [])
        return list(urls[: max(0, self.settings.FEEDS_PER_TOPIC)])

    async def _fetch_impl(self, topic: str) -> FetchResult:
        feed_urls = self.feeds_for_topic(topic)
        if not feed_urls:
            logger.warning(f"No feeds configured for topic '{topic}'")
            return FetchResult.success(self.name, topic, [])

        outcomes = await asyncio.gather(
            *(self._fetch_feed(url, topic) for url in feed_urls),
            return_exceptions=True,
        )

        articles: List[Article] = []
        errors: List[str] = []
        for url, outcome in zip(feed_urls, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Failed to fetch RSS feed {url}: {outcome!r}")
                errors.append(f"{url}: {outcome}")
                continue
            logger.info(f"Fetched {len(outcome)} entries from RSS feed {url}")
            articles.extend(outcome)

        if errors and len(errors) == len(feed_urls):
            return FetchResult.failure(self.name, topic, "; ".join(errors))
        articles = newest_first(articles)
        return FetchResult.success(self.name, topic, articles[: self.settings.MAX_ARTICLES_PER_FETCH])

    async def _fetch_feed(self, url: str, topic: str) -> List[Article]:
        logger.info(f"Fetching RSS feed: {url}")
        try:
            content = await asyncio.wait_for(self._download(url), timeout=self.settings.ENDPOINT_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            raise SourceFetchError(f"timed out after {self.settings.ENDPOINT_TIMEOUT_SECONDS}s")
        # feedparser is synchronous; keep large feeds off the event loop.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.parse_feed, content, url, topic)

    async def _download(self, url: str) -> bytes:
        session = await self._get_session()
        async with session.get(url, timeout=self.request_timeout) as resp:
            if resp.status != 200:
                raise SourceFetchError(f"HTTP {resp.status}")
            return await resp.read()

    def parse_feed(self, content: Any, url: str, topic: str) -> List[Article]:
        """Parse raw feed content into scored articles tagged with ``topic``."""
        feed = feedparser.parse(content)
        if getattr(feed, "bozo", False) and not feed.entries:
            raise SourceFetchError(f"malformed feed: {feed.get('bozo_exception')}")

        fetched_at = _utcnow()
        source = source_from_url(url)
        articles: List[Article] = []
        for entry in feed.entries[: self.settings.RSS_ITEMS_PER_FEED]:
            articles.append(self._make_article(
                title=(entry.get("title") or "").strip(),
                summary=self._entry_summary(entry),
                link=entry.get("link", "") or "",
                publish_date=self._entry_date(entry, fetched_at),
                source=source,
                topic=topic,
                image_url=self._entry_image(entry),
            ))
        return articles

    @staticmethod
    def _entry_summary(entry: Any) -> str:
        summary = strip_html(entry.get("summary") or entry.get("description"))
        if summary:
            return summary
        for content in entry.get("content") or []:
            body = strip_html(content.get("value"))
            if body:
                return body[:RSS_CONTENT_SNIPPET_LENGTH]
        return NO_SUMMARY

    @staticmethod
    def _entry_date(entry: Any, fallback: datetime) -> datetime:
        parsed = entry.get("published_parsed") or entry.get("updated_parsed")
        if not parsed:
            return fallback
        try:
            return datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            return fallback

    @staticmethod
    def _entry_image(entry: Any) -> Optional[str]:
        for thumb in entry.get("media_thumbnail") or []:
            if thumb.get("url"):
                return thumb["url"]
        for media in entry.get("media_content") or []:
            kind = media.get("medium") or media.get("type") or ""
            if media.get("url") and kind.startswith("image"):
                return media["url"]
        for link in entry.get("links") or []:
            if link.get("rel") == "enclosure" and (link.get("type") or "").startswith("image"):
                return link.get("href")
        return None


class HeadlineAPIAdapter(SourceAdapter):
    """
    NewsAPI ``/v2/top-headlines`` adapter.

    Requires at least one API key; without one it is a permanent no-op.
    Keys are tried in rotation starting from the last key that worked, and a
    429 response moves on to the next key.
    When every key is exhausted the adapter stays quiet for
    ``NEWS_API_RATE_LIMIT_COOLDOWN_MINUTES`` to avoid repeated 429s.
    """

    name = "newsapi"

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(settings, session)
        self.api_keys: List[str] = settings.news_api_keys
        self.key_index = 0
        self.rate_limited_until: Optional[datetime] = None
        if not self.api_keys:
            logger.warning("NEWS_API_KEY not configured, headline API adapter disabled")

    @property
    def enabled(self) -> bool:
        return bool(self.api_keys)

    @property
    def rate_limited(self) -> bool:
        return self.rate_limited_until is not None and _utcnow() < self.rate_limited_until

    def build_params(self, topic: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "country": self.settings.NEWS_API_COUNTRY,
            "pageSize": max(1, min(self.settings.NEWS_API_PAGE_SIZE, 100)),
        }
        category = topic_to_category(topic)
        if category:
            params["category"] = category
        else:
            params["q"] = topic
        return params

    async def _fetch_impl(self, topic: str) -> FetchResult:
        if not self.api_keys:
            return FetchResult.skipped(self.name, topic, "no API key configured")
        if self.rate_limited:
            return FetchResult.skipped(self.name, topic, "rate limited")

        params = self.build_params(topic)
        for offset in range(len(self.api_keys)):
            index = (self.key_index + offset) % len(self.api_keys)
            key = self.api_keys[index]
            try:
                status, payload = await self._request(params, key)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.warning(f"NewsAPI request for topic '{topic}' failed: {e!r}")
                return FetchResult.failure(self.name, topic, repr(e))
            if status == 429:
                logger.warning(f"NewsAPI key exhausted (429): {payload}")
                continue
            if status != 200:
                logger.warning(f"NewsAPI /v2/top-headlines responded with status {status}: {payload}")
                return FetchResult.failure(self.name, topic, f"HTTP {status}")
            self.key_index = index
            articles = self.parse_articles(payload, topic)
            logger.info(f"Fetched {len(articles)} NewsAPI articles for topic '{topic}'")
            return FetchResult.success(self.name, topic, articles)

        cooldown = timedelta(minutes=self.settings.NEWS_API_RATE_LIMIT_COOLDOWN_MINUTES)
        self.rate_limited_until = _utcnow() + cooldown
        logger.warning(f"All NewsAPI keys rate limited; pausing headline fetches until {self.rate_limited_until}")
        return FetchResult.skipped(self.name, topic, "rate limited")

    async def _request(self, params: Dict[str, Any], api_key: str) -> Tuple[int, Any]:
        session = await self._get_session()
        query = dict(params, apiKey=api_key)
        async with session.get(NEWSAPI_TOP_HEADLINES_URL, params=query, timeout=self.request_timeout) as resp:
            if resp.status != 200:
                return resp.status, await resp.text()
            return resp.status, await resp.json(content_type=None)

    def parse_articles(self, payload: Any, topic: str) -> List[Article]:
        if not isinstance(payload, dict):
            raise ValueError("unexpected NewsAPI payload")
        fetched_at = _utcnow()
        articles: List[Article] = []
        for item in payload.get("articles") or []:
            title = (item.get("title") or "").strip()
            description = (item.get("description") or "").strip()
            # NewsAPI keeps deleted stories in results as "[Removed]".
            if not title or not description or title == "[Removed]":
                continue
            source = (item.get("source") or {}).get("name") or "Unknown source"
            articles.append(self._make_article(
                title=title,
                summary=description,
                link=item.get("url", "") or "",
                publish_date=self._parse_published(item.get("publishedAt"), fetched_at),
                source=source,
                topic=topic,
                image_url=item.get("urlToImage"),
            ))
        return newest_first(articles)[: self.settings.MAX_ARTICLES_PER_FETCH]

    @staticmethod
    def _parse_published(value: Optional[str], fallback: datetime) -> datetime:
        if not value:
            return fallback
        try:
            published = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except (TypeError, ValueError):
            return fallback
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return published
