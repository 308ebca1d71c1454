from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from .classifier import match_plan_tags
from .models import FeedConfig, NewsItem
from .parser import entry_date, entry_snippet, entry_title


def importance_for(position: int) -> int:
    """Rank score of the ``position``-th entry (0-based) within its own feed."""
    return 80 - 2 * position


def to_news_item(
    entry: Dict[str, Any],
    *,
    feed: FeedConfig,
    source: str,
    position: int,
    now: Optional[datetime] = None,
) -> NewsItem:
    """
    Convert one raw feedparser entry into a NewsItem.

    Never fails on missing fields: the title falls back to a placeholder, the
    date to the current time, and the snippet to an empty string.
    """
    title = entry_title(entry)
    snippet = entry_snippet(entry)
    link = (entry.get("link") or "").strip() or None

    return NewsItem(
        title=title,
        link=link,
        source=source,
        feed_name=feed.name,
        category=feed.category,
        date=entry_date(entry, now=now),
        snippet=snippet,
        importance=importance_for(position),
        plan_tags=tuple(match_plan_tags(title, snippet)),
    )
