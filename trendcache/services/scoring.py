from typing import Iterable, Optional

from ..core.constants import BUSINESS_KEYWORDS


def calculate_relevance_score(
    title: Optional[str],
    body: Optional[str],
    keywords: Iterable[str] = BUSINESS_KEYWORDS,
) -> int:
    """
    Count the distinct lexicon keywords found in ``title`` and ``body``.

    Matching is a case-insensitive substring test over
    ``title + " " + body``; each keyword contributes at most once.
    """
    text = f"{title or ''} {body or ''}".lower()
    seen = set()
    for keyword in keywords:
        needle = keyword.lower()
        if needle and needle not in seen and needle in text:
            seen.add(needle)
    return len(seen)
