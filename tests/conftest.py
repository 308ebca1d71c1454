"""Shared test fixtures."""

from typing import List

import pytest

from policy_pulse.models import FeedConfig


@pytest.fixture
def feed_a() -> FeedConfig:
    return FeedConfig("A", "https://feeds.test/a.xml", "politics")


@pytest.fixture
def feed_b() -> FeedConfig:
    return FeedConfig("B", "https://feeds.test/b.xml", "world")


@pytest.fixture
def feed_c() -> FeedConfig:
    return FeedConfig("C", "https://feeds.test/c.xml", "economy")


@pytest.fixture
def no_sleep(monkeypatch) -> List[float]:
    """Replace the retry backoff sleep and record the requested delays."""
    delays: List[float] = []

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)

    monkeypatch.setattr("policy_pulse.fetcher.asyncio.sleep", fake_sleep)
    return delays
