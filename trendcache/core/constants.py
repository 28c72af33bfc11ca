"""
Static configuration data for the trends engine.

Feed URLs, the relevance lexicon and the NewsAPI category synonyms live
here as plain data so they can be extended and tested without touching the
code that consumes them.
"""

from typing import Dict, List, Tuple

# Syndication feeds per topic.  Topics that are not listed fall back to
# ``general``.  Only the first ``FEEDS_PER_TOPIC`` entries of each list are
# queried on a refresh.
RSS_FEEDS: Dict[str, List[str]] = {
    "technology": [
        "https://techcrunch.com/feed/",
        "https://www.theverge.com/rss/index.xml",
        "https://feeds.feedburner.com/venturebeat/SZYF",
    ],
    "business": [
        "https://feeds.bloomberg.com/markets/news.rss",
        "https://www.reuters.com/business/finance/rss",
        "https://feeds.fortune.com/fortune/feeds/rss/fortune_mostpowerfulwomen.xml",
    ],
    "marketing": [
        "https://feeds.feedburner.com/MarketingLand",
        "https://feeds.feedburner.com/socialmediaexaminer",
        "https://feeds.contentmarketinginstitute.com/ContentMarketingInstitute",
    ],
    "finance": [
        "https://feeds.bloomberg.com/markets/news.rss",
        "https://www.ft.com/rss",
        "https://feeds.feedburner.com/reuters/businessNews",
    ],
    "healthcare": [
        "https://feeds.feedburner.com/HealthcareItNews-NewsAndFeatures",
        "https://www.fierce-network.com/rss/xml",
    ],
    "general": [
        "https://feeds.feedburner.com/reuters/topNews",
        "https://feeds.bbci.co.uk/news/business/rss.xml",
    ],
}

FALLBACK_FEED_TOPIC = "general"

# Business/professional terms used as the sole ranking signal.  Matching is
# case-insensitive substring matching, so the casing here is cosmetic.
BUSINESS_KEYWORDS: Tuple[str, ...] = (
    "business", "market", "revenue", "growth", "innovation", "technology",
    "strategy", "leadership", "management", "industry", "professional",
    "career", "networking", "partnership", "investment", "startup",
    "entrepreneur", "digital transformation", "AI", "automation",
)

# NewsAPI top-headlines categories with the free-form topic words that map
# onto them.  The first category (in this order) with a whole-word match
# wins.
NEWSAPI_CATEGORIES: Dict[str, List[str]] = {
    "business": [
        "business", "finance", "economy", "economic", "stock", "stocks", "markets",
        "company", "companies", "marketing",
    ],
    "entertainment": [
        "entertainment", "movie", "movies", "film", "cinema", "hollywood", "music",
        "celebrity", "celebrities",
    ],
    "general": [
        "general", "news", "top stories", "headlines", "current events",
    ],
    "health": [
        "health", "healthcare", "medicine", "medical", "wellness", "fitness",
    ],
    "science": [
        "science", "research", "physics", "chemistry", "biology", "space", "astronomy",
    ],
    "sports": [
        "sports", "sport", "football", "soccer", "basketball", "baseball", "tennis",
        "golf", "olympics",
    ],
    "technology": [
        "technology", "tech", "gadget", "gadgets", "ai", "artificial intelligence",
        "machine learning", "computing", "software",
    ],
}

NEWSAPI_TOP_HEADLINES_URL = "https://newsapi.org/v2/top-headlines"

USER_AGENT = "Mozilla/5.0 (compatible; TrendCache/1.0)"

NO_SUMMARY = "No summary available"
SUMMARY_DISPLAY_LENGTH = 150
RSS_CONTENT_SNIPPET_LENGTH = 200
