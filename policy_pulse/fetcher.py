from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

import httpx

from .config import ACCEPT, BACKOFF_SEC, FEED_TIMEOUT_SEC, MAX_ATTEMPTS, MAX_ENTRIES_PER_FEED, USER_AGENT
from .exceptions import FeedFetchError, FeedParseError
from .models import FeedConfig, NewsItem
from .normalizer import to_news_item
from .parser import parse_feed

logger = logging.getLogger(__name__)


def make_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """HTTP client with the browser-like headers and per-request timeout feeds expect."""
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT, "Accept": ACCEPT},
        timeout=FEED_TIMEOUT_SEC,
        follow_redirects=True,
        transport=transport,
    )


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    attempts: int = MAX_ATTEMPTS,
    backoff_sec: float = BACKOFF_SEC,
    timeout_sec: float = FEED_TIMEOUT_SEC,
) -> bytes:
    """
    GET ``url`` and return the raw body.

    Each attempt, body included, must finish within ``timeout_sec``. Transport
    errors, timeouts and non-2xx responses are retried with a linear backoff
    of ``backoff_sec * attempt``. The last failure is raised as FeedFetchError.
    """
    for attempt in range(1, attempts + 1):
        try:
            resp = await asyncio.wait_for(client.get(url), timeout_sec)
            resp.raise_for_status()
            return resp.content
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            if attempt == attempts:
                raise FeedFetchError(f"Failed to fetch feed: {url} ({e!r})") from e
            logger.info("Retrying %s (%d/%d)...", url, attempt, attempts)
            await asyncio.sleep(backoff_sec * attempt)
    raise FeedFetchError(f"No attempts made for {url}")


async def fetch_feed(
    client: httpx.AsyncClient,
    feed: FeedConfig,
    source: str,
    *,
    backoff_sec: float = BACKOFF_SEC,
) -> List[NewsItem]:
    """
    Fetch one feed and return at most MAX_ENTRIES_PER_FEED normalized items.

    Never raises for fetch or parse problems: a broken feed is logged and
    yields an empty list, so one outage cannot block the other feeds.
    """
    logger.info("  > Fetching: %s", feed.name)
    try:
        body = await fetch_with_retry(client, feed.url, backoff_sec=backoff_sec)
        entries = parse_feed(body, name=feed.name)
        items = [
            to_news_item(entry, feed=feed, source=source, position=i)
            for i, entry in enumerate(entries[:MAX_ENTRIES_PER_FEED])
        ]
    except (FeedFetchError, FeedParseError) as e:
        logger.error("    Failed to fetch %s (%s): %s", feed.name, source, e)
        return []
    except Exception:
        logger.exception("    Unexpected error reading %s (%s)", feed.name, source)
        return []

    logger.info("    Got %d items from %s", len(items), feed.name)
    return items
