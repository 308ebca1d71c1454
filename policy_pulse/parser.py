from __future__ import annotations

import calendar
import re
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import feedparser
from bs4 import BeautifulSoup
from feedparser.datetimes import _parse_date

from .config import PLACEHOLDER_TITLE, SNIPPET_LIMIT
from .exceptions import FeedParseError


_WS_RE = re.compile(r"\s+")


def parse_feed(body: Union[str, bytes], *, name: str = "feed") -> List[Dict[str, Any]]:
    """
    Parse an RSS/Atom document and return its entries in document order.

    Raises FeedParseError when the document is malformed and yields no entries.
    A bozo feed that still produced entries is accepted as-is.
    """
    feed = feedparser.parse(body)
    entries = getattr(feed, "entries", None)
    if getattr(feed, "bozo", 0) and not entries:
        exc = getattr(feed, "bozo_exception", None)
        msg = f"Invalid RSS/Atom feed: {name}"
        if exc:
            msg += f" ({exc})"
        raise FeedParseError(msg)
    if not isinstance(entries, list):
        raise FeedParseError(f"Feed has no entries: {name}")
    return entries


def entry_title(entry: Dict[str, Any]) -> str:
    title = (entry.get("title") or "").strip()
    return title or PLACEHOLDER_TITLE


def _html_to_text(markup: str) -> str:
    return BeautifulSoup(markup, "html.parser").get_text(" ")


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def entry_snippet(entry: Dict[str, Any], limit: int = SNIPPET_LIMIT) -> str:
    """
    Plain-text snippet for an entry, whitespace-collapsed and cut to ``limit`` chars.

    A summary feedparser already marks as text/plain is used verbatim; otherwise
    the summary or the first content block is treated as HTML.
    """
    summary = entry.get("summary") or ""
    detail = entry.get("summary_detail") or {}
    if summary and detail.get("type") == "text/plain":
        text = summary
    else:
        markup = summary
        if not markup:
            content = entry.get("content") or []
            if content and isinstance(content[0], dict):
                markup = content[0].get("value") or ""
        text = _html_to_text(markup) if markup else ""
    return _collapse(text)[:limit].strip()


def entry_date(entry: Dict[str, Any], now: Optional[datetime] = None) -> str:
    """
    Publication timestamp exactly as the feed wrote it.

    Priority: published -> updated -> current UTC time in ISO-8601.
    """
    for key in ("published", "updated"):
        val = entry.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return (now or datetime.now(timezone.utc)).isoformat()


def date_sort_key(value: str) -> float:
    """
    Seconds since the epoch for a feed date string.

    Unparsable dates map to ``-inf`` so they sink below every dated item.
    """
    try:
        parsed = _parse_date(value)
        if isinstance(parsed, time.struct_time):
            return float(calendar.timegm(parsed))
    except (ValueError, TypeError, OverflowError):
        pass
    return float("-inf")
