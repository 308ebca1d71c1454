"""Test helpers: in-memory RSS documents, a fake HTTP transport, item builders."""

from html import escape
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

import httpx

from policy_pulse.models import NewsItem


Entry = Tuple[Optional[str], Optional[str], str]  # (title, pubDate, description)


def rss_feed(entries: Iterable[Entry], *, channel: str = "Test channel") -> bytes:
    """Build a minimal RSS 2.0 document; ``None`` fields are omitted."""
    items = []
    for i, (title, date, desc) in enumerate(entries):
        parts = [f"<link>https://example.com/{i}</link>"]
        if title is not None:
            parts.append(f"<title>{escape(title)}</title>")
        if date is not None:
            parts.append(f"<pubDate>{date}</pubDate>")
        if desc:
            parts.append(f"<description>{escape(desc)}</description>")
        items.append("<item>" + "".join(parts) + "</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{channel}</title><link>https://example.com/</link><description>t</description>"
        + "".join(items)
        + "</channel></rss>"
    ).encode("utf-8")


Route = Union[bytes, Exception, int, Callable[[httpx.Request], httpx.Response]]


class FakeFeeds:
    """
    httpx transport serving canned responses per URL.

    A route may be a body, an exception to raise, an HTTP status code, or a handler.
    Every request is counted in ``calls``.
    """

    def __init__(self, routes: Dict[str, Route]) -> None:
        self.routes = routes
        self.calls: Dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls[url] = self.calls.get(url, 0) + 1
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, request=request)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, int):
            return httpx.Response(route, request=request)
        if callable(route):
            return route(request)
        return httpx.Response(200, content=route, request=request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def timeout_error(url: str) -> httpx.ReadTimeout:
    return httpx.ReadTimeout("timed out", request=httpx.Request("GET", url))


def make_item(
    title: str = "测试新闻",
    date: str = "2024-01-01",
    source: str = "人民日报",
    feed_name: str = "时政要闻",
    importance: int = 80,
) -> NewsItem:
    return NewsItem(
        title=title,
        link=f"https://example.com/{title}",
        source=source,
        feed_name=feed_name,
        category="politics",
        date=date,
        snippet="",
        importance=importance,
    )


