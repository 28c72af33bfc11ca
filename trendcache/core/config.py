"""
Application configuration management.

This module defines a ``Settings`` dataclass that reads its values from
environment variables at instantiation time.  Each configuration option
has a reasonable default which can be overridden by setting the
corresponding environment variable.  Tests construct ``Settings`` directly
and pass overrides as keyword arguments.
"""

from dataclasses import dataclass, field
import logging
import os
from typing import List, Optional

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read an integer variable, falling back to ``default`` when malformed."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {raw!r}; using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}: {raw!r}; using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: List[str]) -> List[str]:
    """Read a comma-separated list; empty entries are dropped."""
    raw = os.getenv(name)
    if not raw:
        return list(default)
    values = [item.strip().lower() for item in raw.split(",") if item.strip()]
    return values or list(default)


@dataclass
class Settings:
    """Configuration values loaded from environment variables with defaults."""

    # Application settings
    ENVIRONMENT: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    PORT: int = field(default_factory=lambda: _env_int("PORT", 5000))
    LOG_LEVEL: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Headline API (NewsAPI.org).  Without a key the headline adapter is a
    # no-op and only syndication feeds are used.  ``NEWS_API_KEY_1`` and
    # ``NEWS_API_KEY_2`` are rotated through when a key hits its quota.
    NEWS_API_KEY: Optional[str] = field(default_factory=lambda: os.getenv("NEWS_API_KEY"))
    NEWS_API_KEY_1: Optional[str] = field(default_factory=lambda: os.getenv("NEWS_API_KEY_1"))
    NEWS_API_KEY_2: Optional[str] = field(default_factory=lambda: os.getenv("NEWS_API_KEY_2"))
    NEWS_API_COUNTRY: str = field(default_factory=lambda: os.getenv("NEWS_API_COUNTRY", "us").lower())
    NEWS_API_PAGE_SIZE: int = field(default_factory=lambda: _env_int("NEWS_API_PAGE_SIZE", 20))
    NEWS_API_RATE_LIMIT_COOLDOWN_MINUTES: int = field(
        default_factory=lambda: _env_int("NEWS_API_RATE_LIMIT_COOLDOWN_MINUTES", 60)
    )

    # Cache and refresh policy
    TRENDS_CACHE_TTL_MINUTES: int = field(default_factory=lambda: _env_int("TRENDS_CACHE_TTL_MINUTES", 30))
    TRENDS_REFRESH_INTERVAL_MINUTES: int = field(
        default_factory=lambda: _env_int("TRENDS_REFRESH_INTERVAL_MINUTES", 30)
    )
    TRENDS_WARMUP_DELAY_SECONDS: float = field(
        default_factory=lambda: _env_float("TRENDS_WARMUP_DELAY_SECONDS", 5.0)
    )
    TRENDS_SCHEDULER_ENABLED: bool = field(default_factory=lambda: _env_bool("TRENDS_SCHEDULER_ENABLED", True))

    # Aggregation limits
    MAX_CORPUS_SIZE: int = field(default_factory=lambda: _env_int("MAX_CORPUS_SIZE", 50))
    FEEDS_PER_TOPIC: int = field(default_factory=lambda: _env_int("FEEDS_PER_TOPIC", 2))
    RSS_ITEMS_PER_FEED: int = field(default_factory=lambda: _env_int("RSS_ITEMS_PER_FEED", 10))
    MAX_ARTICLES_PER_FETCH: int = field(default_factory=lambda: _env_int("MAX_ARTICLES_PER_FETCH", 20))
    FETCH_TIMEOUT_SECONDS: float = field(default_factory=lambda: _env_float("FETCH_TIMEOUT_SECONDS", 15.0))
    # Per feed download or API request.  Must stay below FETCH_TIMEOUT_SECONDS,
    # which bounds the whole adapter call.
    ENDPOINT_TIMEOUT_SECONDS: float = field(default_factory=lambda: _env_float("ENDPOINT_TIMEOUT_SECONDS", 10.0))
    MAX_CONCURRENT_FETCHES: int = field(default_factory=lambda: _env_int("MAX_CONCURRENT_FETCHES", 8))

    # Topic sets used when the caller supplies none, and by the background
    # refresh triggers.
    DEFAULT_TOPICS: List[str] = field(
        default_factory=lambda: _env_list("DEFAULT_TOPICS", ["business", "technology"])
    )
    SCHEDULED_TOPICS: List[str] = field(
        default_factory=lambda: _env_list("SCHEDULED_TOPICS", ["business", "technology", "marketing", "finance"])
    )
    WARMUP_TOPICS: List[str] = field(
        default_factory=lambda: _env_list("WARMUP_TOPICS", ["business", "technology", "marketing"])
    )

    # CORS
    CORS_ORIGINS: List[str] = field(default_factory=lambda: [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:8000",
    ])

    @property
    def news_api_keys(self) -> List[str]:
        """
        Return the configured NewsAPI keys in rotation order.

        The primary ``NEWS_API_KEY`` always comes first, followed by the
        numbered keys.  Duplicates and empty values are skipped.
        """
        keys: List[str] = []
        for key in (self.NEWS_API_KEY, self.NEWS_API_KEY_1, self.NEWS_API_KEY_2):
            if key and key not in keys:
                keys.append(key)
        return keys

    @property
    def has_news_api_key(self) -> bool:
        return bool(self.news_api_keys)

    @property
    def cache_ttl_seconds(self) -> float:
        return self.TRENDS_CACHE_TTL_MINUTES * 60.0

    @property
    def refresh_interval_seconds(self) -> float:
        return max(1, self.TRENDS_REFRESH_INTERVAL_MINUTES) * 60.0


# Instantiate a single settings object that can be imported across the
# application.
settings = Settings()
