"""
policy_pulse

Daily static report over Chinese state-media RSS feeds.

Core ideas:
- Input: a catalog of sources, each made of one or more RSS/Atom feeds
- Process: fetch (concurrently, with retry) → parse → tag → deduplicate by title → sort (newest first)
- Archive: one JSON file per day; the last 7 days feed a weekly trend report
- Output: Dict[source_key, List[NewsItem]], plus optional LLM briefings

Example
-------
from policy_pulse import NewsFetcher, ArchiveStore

fetcher = NewsFetcher()
news = fetcher.fetch_all(["peopleDaily", "xinhua"])

for item in news["xinhua"]:
    print(item.date, item.feed_name, item.title)

store = ArchiveStore("archive")
store.archive("2024-01-01", news["peopleDaily"] + news["xinhua"])
window = store.load_recent_window()
"""
from .models import ArchiveRecord, FeedConfig, NewsItem, PlanTag
from .core import NewsFetcher
from .archive import ArchiveStore
from .summarizers import SummarizeOptions, build_summarizer
from .build import run_build

__all__ = [
    "ArchiveRecord",
    "ArchiveStore",
    "FeedConfig",
    "NewsFetcher",
    "NewsItem",
    "PlanTag",
    "SummarizeOptions",
    "build_summarizer",
    "run_build",
]
