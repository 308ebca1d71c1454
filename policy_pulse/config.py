from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from .models import FeedConfig


FEED_TIMEOUT_SEC = 15.0
MAX_ATTEMPTS = 3
BACKOFF_SEC = 1.0
MAX_ENTRIES_PER_FEED = 20
SNIPPET_LIMIT = 300
ARCHIVE_ITEM_LIMIT = 50
WINDOW_DAYS = 7
MIN_TREND_DAYS = 3
DAILY_TITLE_LIMIT = 15
WEEKLY_TITLE_LIMIT = 5
BRIEFING_CONCURRENCY = 2
DAILY_TIMEOUT_SEC = 30.0
TREND_TIMEOUT_SEC = 120.0

USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
ACCEPT = "application/rss+xml, application/xml, text/xml; q=0.1"
PLACEHOLDER_TITLE = "无标题"

SOURCE_KEYS: Tuple[str, ...] = ("peopleDaily", "xinhua")

SOURCE_LABELS: Mapping[str, str] = MappingProxyType({
    "peopleDaily": "人民日报",
    "xinhua": "新华社",
})

DEFAULT_FEEDS: Mapping[str, Tuple[FeedConfig, ...]] = MappingProxyType({
    "peopleDaily": (
        FeedConfig("时政要闻", "http://www.people.com.cn/rss/politics.xml", "politics"),
        FeedConfig("社会新闻", "http://www.people.com.cn/rss/society.xml", "society"),
        FeedConfig("法治新闻", "http://www.people.com.cn/rss/legal.xml", "legal"),
        FeedConfig("国际新闻", "http://www.people.com.cn/rss/world.xml", "world"),
        FeedConfig("要闻快讯", "http://www.people.com.cn/rss/ywkx.xml", "breaking"),
    ),
    "xinhua": (
        FeedConfig("新华国际", "http://www.xinhuanet.com/world/news_world.xml", "world"),
        FeedConfig("新华财经", "http://www.xinhuanet.com/fortune/news_fortune.xml", "economy"),
        FeedConfig("新华军事", "http://www.xinhuanet.com/mil/news_mil.xml", "military"),
        FeedConfig("新华法治", "http://www.xinhuanet.com/legal/news_legal.xml", "legal"),
    ),
})


@dataclass(frozen=True)
class Settings:
    archive_dir: Path = Path("archive")
    output_dir: Path = Path("docs")
    provider: str = "deepseek"  # "deepseek" | "openai" | "gemini" | "none"
    api_key: Optional[str] = None
    daily_model: Optional[str] = None
    trend_model: Optional[str] = None
    source_keys: Tuple[str, ...] = SOURCE_KEYS

    @classmethod
    def from_env(cls, *, dotenv: bool = True, **overrides) -> "Settings":
        """
        Build settings from the process environment (and a ``.env`` file when present).

        Keyword overrides win over the environment; ``None`` overrides are ignored.
        """
        if dotenv:
            load_dotenv()
        values = {
            "archive_dir": Path(os.getenv("POLICY_PULSE_ARCHIVE_DIR", "archive")),
            "output_dir": Path(os.getenv("POLICY_PULSE_OUTPUT_DIR", "docs")),
            "provider": os.getenv("POLICY_PULSE_PROVIDER", "deepseek").lower(),
            "api_key": os.getenv("DEEPSEEK_API_KEY") or None,
            "daily_model": os.getenv("POLICY_PULSE_DAILY_MODEL") or None,
            "trend_model": os.getenv("POLICY_PULSE_TREND_MODEL") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
