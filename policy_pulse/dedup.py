from __future__ import annotations

from typing import Iterable, List, Set

from .models import NewsItem
from .parser import date_sort_key


def deduplicate(items: Iterable[NewsItem]) -> List[NewsItem]:
    """
    Drop items whose title was already seen.

    Titles are compared by exact string equality. Keeps the first occurrence
    and preserves original order.
    """
    seen: Set[str] = set()
    out: List[NewsItem] = []
    for it in items:
        if it.title in seen:
            continue
        seen.add(it.title)
        out.append(it)
    return out


def sort_newest_first(items: Iterable[NewsItem]) -> List[NewsItem]:
    # Stable: items with equal (or equally unparsable) dates keep their order.
    return sorted(items, key=lambda it: date_sort_key(it.date), reverse=True)
