from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .archive import ArchiveStore
from .config import MIN_TREND_DAYS, Settings
from .core import NewsFetcher
from .models import NewsItem
from .publish import publish
from .summarizers import SummarizeOptions, Summarizer, build_summarizer, cap_window, generate_briefings

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    date: str
    data: Dict[str, Any]
    history: List[str] = field(default_factory=list)
    archive_path: Optional[Path] = None


def summarizer_for(settings: Settings) -> Summarizer:
    return build_summarizer(SummarizeOptions(
        provider=settings.provider,
        api_key=settings.api_key,
        daily_model=settings.daily_model,
        trend_model=settings.trend_model,
    ))


def run_build(
    settings: Settings,
    *,
    fetcher: Optional[NewsFetcher] = None,
    summarizer: Optional[Summarizer] = None,
    now: Optional[datetime] = None,
) -> BuildResult:
    """
    One full build: fetch → briefings → archive → weekly trend → publish.

    Feed and summarizer failures only drop their own section. Archive read
    errors and filesystem errors propagate to the caller.
    """
    now = now or datetime.now(timezone.utc)
    date = now.date().isoformat()
    fetcher = fetcher or NewsFetcher()
    summarizer = summarizer or summarizer_for(settings)
    store = ArchiveStore(settings.archive_dir)

    settings.output_dir.mkdir(parents=True, exist_ok=True)
    settings.archive_dir.mkdir(parents=True, exist_ok=True)

    logger.info("Step 1: Fetching news sources...")
    sources = fetcher.fetch_all(settings.source_keys)
    data: Dict[str, Any] = {
        "timestamp": now.isoformat(),
        "sources": sources,
        "briefings": {},
    }

    logger.info("Step 2: Generating AI briefings...")
    tasks = [(key, fetcher.label_for(key), sources.get(key) or []) for key in settings.source_keys]
    data["briefings"] = generate_briefings(summarizer, tasks)

    logger.info("Step 3: Processing weekly trend...")
    combined: List[NewsItem] = [it for key in settings.source_keys for it in sources.get(key) or []]
    archive_path = store.archive(date, combined)

    window = store.load_recent_window()
    if len(window) >= MIN_TREND_DAYS:
        logger.info("> Generating weekly trend from %d days of data...", len(window))
        try:
            trend = summarizer.summarize_weekly(cap_window(window))
        except Exception as e:
            logger.error("Weekly trend generation failed: %s", e)
            trend = None
        if trend:
            data["weeklyTrend"] = trend
            logger.info("Weekly trend report generated")
    else:
        logger.warning("Only %d days of data, need at least %d for trend analysis", len(window), MIN_TREND_DAYS)

    logger.info("Step 4: Generating HTML files...")
    history = publish(settings.output_dir, date, data, fetcher.labels)

    return BuildResult(date=date, data=data, history=history, archive_path=archive_path)
