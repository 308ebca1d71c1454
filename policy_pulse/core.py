from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import httpx

from .config import BACKOFF_SEC, DEFAULT_FEEDS, SOURCE_KEYS, SOURCE_LABELS
from .dedup import deduplicate, sort_newest_first
from .fetcher import fetch_feed, make_client
from .models import FeedConfig, NewsItem

logger = logging.getLogger(__name__)


class NewsFetcher:
    """
    High-level API: fetch every feed of a source and return normalized NewsItems.

    Pipeline per source: fetch feeds concurrently → flatten in declaration order
    → deduplicate by title → sort (newest first).

    The feed catalog is passed in, never read from module state, so tests can
    run against fixture feeds and a fake transport.
    """

    def __init__(
        self,
        *,
        feeds: Mapping[str, Sequence[FeedConfig]] = DEFAULT_FEEDS,
        labels: Mapping[str, str] = SOURCE_LABELS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        backoff_sec: float = BACKOFF_SEC,
    ) -> None:
        self.feeds = {key: tuple(value) for key, value in feeds.items()}
        self.labels = dict(labels)
        self._transport = transport
        self._backoff_sec = backoff_sec

    def label_for(self, source_key: str) -> str:
        return self.labels.get(source_key, source_key)

    async def afetch_source(self, client: httpx.AsyncClient, source_key: str) -> List[NewsItem]:
        feeds = self.feeds.get(source_key)
        if not feeds:
            logger.warning("Unknown source: %s", source_key)
            return []

        label = self.label_for(source_key)
        logger.info("> Fetching %s...", label)

        # gather() returns results in argument order regardless of completion order
        results = await asyncio.gather(
            *(fetch_feed(client, feed, label, backoff_sec=self._backoff_sec) for feed in feeds)
        )
        all_items = [it for items in results for it in items]

        items = sort_newest_first(deduplicate(all_items))
        logger.info("%s: %d unique items (from %d total)", label, len(items), len(all_items))
        return items

    async def afetch_all(self, source_keys: Iterable[str]) -> Dict[str, List[NewsItem]]:
        data: Dict[str, List[NewsItem]] = {}
        async with make_client(self._transport) as client:
            for key in source_keys:
                data[key] = await self.afetch_source(client, key)
        return data

    def fetch_source(self, source_key: str) -> List[NewsItem]:
        return self.fetch_all([source_key])[source_key]

    def fetch_all(self, source_keys: Iterable[str] = SOURCE_KEYS) -> Dict[str, List[NewsItem]]:
        """Fetch each source in turn; a failing source maps to an empty list."""
        return asyncio.run(self.afetch_all(list(source_keys)))
