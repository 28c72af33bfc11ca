"""
Caller input normalization.

Malformed topics or limits are never rejected: they fall back to the
defaults so a query always gets an answer.
"""

from typing import Any, Iterable, List, Optional

DEFAULT_TOPICS: List[str] = ["business", "technology"]
DEFAULT_LIMIT = 20


def normalize_topics(topics: Any, default: Optional[Iterable[str]] = None) -> List[str]:
    """
    Trim, lower-case and de-duplicate a topic list.

    Non-string entries and empty strings are dropped.  When nothing usable
    is left (or ``topics`` is not a list/tuple/set at all) a copy of
    ``default`` is returned.
    """
    fallback = list(default) if default is not None else list(DEFAULT_TOPICS)
    if isinstance(topics, str) or not isinstance(topics, (list, tuple, set, frozenset)):
        return fallback
    normalized: List[str] = []
    for topic in topics:
        if not isinstance(topic, str):
            continue
        cleaned = topic.strip().lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized or fallback


def parse_topics_param(raw: Optional[str], default: Optional[Iterable[str]] = None) -> List[str]:
    """Parse a comma-separated ``topics`` query parameter."""
    if not raw or not isinstance(raw, str):
        return normalize_topics(None, default)
    return normalize_topics(raw.split(","), default)


def parse_limit(raw: Any, default: int = DEFAULT_LIMIT) -> int:
    """
    Coerce a ``limit`` parameter to a non-negative integer.

    Non-numeric values give ``default``; negative values clamp to 0.
    """
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return max(0, value)
