from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class PlanTag:
    id: str
    name: str
    icon: str
    color: str


@dataclass(frozen=True)
class FeedConfig:
    """One RSS endpoint and the static category label attached to its items."""
    name: str
    url: str
    category: str


@dataclass(frozen=True)
class NewsItem:
    """
    Normalized news item as stored in the daily archive.

    WARNING: field names are the on-disk archive format. Rename with care.

    ``date`` is kept exactly as the feed published it (RFC-822 or ISO-8601).
    ``importance`` only ranks items within the feed they came from.
    """
    title: str
    source: str
    feed_name: str
    category: str
    date: str
    snippet: str = ""
    importance: int = 0
    link: Optional[str] = None
    plan_tags: Tuple[PlanTag, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "source": self.source,
            "feedName": self.feed_name,
            "category": self.category,
            "date": self.date,
            "snippet": self.snippet,
            "importance": self.importance,
            "planTags": [asdict(t) for t in self.plan_tags],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NewsItem":
        # Unknown keys are ignored so newer archives stay readable.
        tags = tuple(
            PlanTag(
                id=t.get("id", ""),
                name=t.get("name", ""),
                icon=t.get("icon", ""),
                color=t.get("color", ""),
            )
            for t in data.get("planTags") or []
        )
        return cls(
            title=data["title"],
            link=data.get("link"),
            source=data.get("source", ""),
            feed_name=data.get("feedName", ""),
            category=data.get("category", ""),
            date=data.get("date", ""),
            snippet=data.get("snippet", ""),
            importance=data.get("importance", 0),
            plan_tags=tags,
        )


@dataclass(frozen=True)
class ArchiveRecord:
    date: str
    items: Tuple[NewsItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "items": [it.to_dict() for it in self.items]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArchiveRecord":
        return cls(
            date=data["date"],
            items=tuple(NewsItem.from_dict(it) for it in data.get("items", [])),
        )

    def titles(self, limit: Optional[int] = None) -> List[str]:
        items = self.items if limit is None else self.items[:limit]
        return [it.title for it in items]
