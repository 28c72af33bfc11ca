import re
from html import unescape
from typing import Optional
from urllib.parse import urlparse

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def strip_html(value: Optional[str]) -> str:
    """Remove markup and collapse whitespace, similar to a feed content snippet."""
    if not value:
        return ""
    text = _TAG_RE.sub(" ", value)
    text = unescape(text)
    return _WS_RE.sub(" ", text).strip()


def truncate(value: str, length: int, marker: str = "...") -> str:
    if len(value) <= length:
        return value
    return value[:length] + marker


def source_from_url(url: str) -> str:
    """Return the host part of ``url`` for use as a source label."""
    netloc = urlparse(url).netloc
    return netloc or url
