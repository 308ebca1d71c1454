from __future__ import annotations

import concurrent.futures as _fut
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from .config import (
    BRIEFING_CONCURRENCY,
    DAILY_TIMEOUT_SEC,
    DAILY_TITLE_LIMIT,
    TREND_TIMEOUT_SEC,
    WEEKLY_TITLE_LIMIT,
)
from .exceptions import SummarizerError
from .models import ArchiveRecord, NewsItem

logger = logging.getLogger(__name__)

DEEPSEEK_BASE_URL = "https://api.deepseek.com"

_DAILY_SYSTEM = "你是专业的中国政策新闻分析师。"
_TREND_SYSTEM = "你是专业的中国政策研究专家，擅长从官方媒体报道中分析政策趋势。"


class Summarizer(Protocol):
    def summarize_daily(self, source: str, items: Sequence[NewsItem]) -> Optional[str]:  # pragma: no cover - interface
        ...

    def summarize_weekly(self, window: Sequence[ArchiveRecord]) -> Optional[str]:  # pragma: no cover - interface
        ...


class ChatBackend(Protocol):
    def complete(self, *, system: str, user: str, model: str, timeout_sec: float) -> str:  # pragma: no cover - interface
        ...


@dataclass
class SummarizeOptions:
    provider: str = "deepseek"  # "deepseek" | "openai" | "gemini" | "none"
    api_key: Optional[str] = None
    daily_model: Optional[str] = None
    trend_model: Optional[str] = None
    daily_timeout_sec: float = DAILY_TIMEOUT_SEC
    trend_timeout_sec: float = TREND_TIMEOUT_SEC


_DEFAULT_MODELS = {
    "deepseek": ("deepseek-chat", "deepseek-reasoner"),
    "openai": ("gpt-4o-mini", "gpt-4o"),
    "gemini": ("gemini-1.5-flash", "gemini-1.5-pro"),
}


class NullSummarizer:
    def summarize_daily(self, source: str, items: Sequence[NewsItem]) -> Optional[str]:
        return None

    def summarize_weekly(self, window: Sequence[ArchiveRecord]) -> Optional[str]:
        return None


class OpenAIBackend:
    """Chat Completions client; also serves DeepSeek through its compatible endpoint."""

    def __init__(self, *, api_key: str, base_url: Optional[str] = None) -> None:
        try:
            from openai import OpenAI  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise SummarizerError("openai package is required for this provider. Install with `pip install openai`.") from e
        self._client = OpenAI(api_key=api_key, base_url=base_url)

    def complete(self, *, system: str, user: str, model: str, timeout_sec: float) -> str:
        resp = self._client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            stream=False,
            timeout=timeout_sec,
        )
        content = resp.choices[0].message.content if resp and resp.choices else None
        if not content:
            raise SummarizerError(f"Empty response from {model}")
        return content.strip()


class GeminiBackend:
    def __init__(self, *, api_key: str) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except Exception as e:  # pragma: no cover - optional dep
            raise SummarizerError("google-generativeai package is required for Gemini. Install with `pip install google-generativeai`.") from e
        genai.configure(api_key=api_key)
        self._genai = genai

    def complete(self, *, system: str, user: str, model: str, timeout_sec: float) -> str:
        gm = self._genai.GenerativeModel(model, system_instruction=system)
        resp = gm.generate_content(user, request_options={"timeout": timeout_sec})
        text = getattr(resp, "text", None)
        if not text:
            raise SummarizerError(f"Empty response from {model}")
        return str(text).strip()


def daily_prompt(source: str, items: Sequence[NewsItem]) -> str:
    titles = "\n".join(f"- {it.title}" for it in items[:DAILY_TITLE_LIMIT])
    return (
        f"你是一名资深时政分析师。请根据以下{source}新闻标题，提取最重要的3-5条政策信号或要点。\n\n"
        "要求:\n"
        '1. 每条要点用 "### 🔹 [要点标题]" 格式\n'
        "2. 每个要点下用中文简述其背景和意义\n"
        "3. 只输出Markdown格式内容，不要开场白\n"
        "4. 相关联的新闻合并分析\n\n"
        f"新闻来源: {source}\n"
        f"今日新闻:\n{titles}\n"
    )


def weekly_prompt(window: Sequence[ArchiveRecord]) -> str:
    blocks = []
    for day in window:
        top = "\n".join(f"  - {t}" for t in day.titles(WEEKLY_TITLE_LIMIT))
        blocks.append(f"### {day.date}\n{top}")
    week = "\n\n".join(blocks)
    return (
        "你是一名资深政策研究专家。请分析以下近一周的中国官方媒体新闻，生成政策发展趋势报告。\n\n"
        "报告结构要求:\n"
        "## 📊 本周核心政策动向\n（总结3-5个本周最重要的政策方向）\n\n"
        "## 📈 趋势变化分析\n（与上周/近期相比，有哪些政策重点的变化）\n\n"
        "## ⚠️ 值得关注的信号\n（可能暗示未来政策变化的蛛丝马迹）\n\n"
        "## 🔮 下周研判\n（基于本周情况，下周可能的政策关注点）\n\n"
        "---\n"
        f"一周新闻概览:\n{week}\n"
    )


class BriefingSummarizer:
    """
    Daily briefings and weekly trend reports over a chat backend.

    Both entry points are best-effort: any backend failure is logged and
    returned as None so the caller simply omits the section.
    """

    def __init__(self, backend: ChatBackend, options: SummarizeOptions) -> None:
        daily, trend = _DEFAULT_MODELS.get(options.provider, _DEFAULT_MODELS["deepseek"])
        self._backend = backend
        self._daily_model = options.daily_model or daily
        self._trend_model = options.trend_model or trend
        self._options = options

    def summarize_daily(self, source: str, items: Sequence[NewsItem]) -> Optional[str]:
        if not items:
            return None
        try:
            return self._backend.complete(
                system=_DAILY_SYSTEM,
                user=daily_prompt(source, items),
                model=self._daily_model,
                timeout_sec=self._options.daily_timeout_sec,
            )
        except Exception as e:
            logger.error("Briefing generation failed for %s: %s", source, e)
            return None

    def summarize_weekly(self, window: Sequence[ArchiveRecord]) -> Optional[str]:
        if not window:
            return None
        try:
            return self._backend.complete(
                system=_TREND_SYSTEM,
                user=weekly_prompt(window),
                model=self._trend_model,
                timeout_sec=self._options.trend_timeout_sec,
            )
        except Exception as e:
            logger.error("Weekly trend generation failed: %s", e)
            return None


def _resolve_key(provider: str, api_key: Optional[str]) -> Optional[str]:
    if api_key:
        return api_key
    if provider == "deepseek":
        return os.getenv("DEEPSEEK_API_KEY")
    if provider == "openai":
        return os.getenv("OPENAI_API_KEY")
    if provider == "gemini":
        return os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
    return None


def build_summarizer(options: Optional[SummarizeOptions]) -> Summarizer:
    """
    Pick a summarizer for ``options``.

    Unknown providers, a missing key, or a missing client package all degrade
    to NullSummarizer with a warning; the build carries on without summaries.
    """
    if not options:
        return NullSummarizer()
    provider = (options.provider or "").lower()
    if provider not in _DEFAULT_MODELS:
        if provider != "none":
            logger.warning("Unknown summarizer provider %r; summaries disabled", provider)
        return NullSummarizer()

    key = _resolve_key(provider, options.api_key)
    if not key:
        logger.warning("Skipping summaries: no API key for %s", provider)
        return NullSummarizer()

    try:
        if provider == "gemini":
            backend: ChatBackend = GeminiBackend(api_key=key)
        elif provider == "deepseek":
            backend = OpenAIBackend(api_key=key, base_url=DEEPSEEK_BASE_URL)
        else:
            backend = OpenAIBackend(api_key=key)
    except SummarizerError as e:
        logger.warning("Skipping summaries: %s", e)
        return NullSummarizer()
    return BriefingSummarizer(backend, options)


def _chunks(seq: Sequence, size: int) -> List[Sequence]:
    return [seq[i:i + size] for i in range(0, len(seq), size)]


def generate_briefings(
    summarizer: Summarizer,
    tasks: Sequence[Tuple[str, str, Sequence[NewsItem]]],
    *,
    concurrency: int = BRIEFING_CONCURRENCY,
) -> Dict[str, str]:
    """
    Run daily briefings for ``(key, label, items)`` tasks.

    Tasks run in batches of ``concurrency``; a batch finishes before the next
    starts. Sources without items or without a briefing are left out.
    """
    briefings: Dict[str, str] = {}

    def _one(task: Tuple[str, str, Sequence[NewsItem]]) -> Optional[str]:
        key, label, items = task
        if not items:
            logger.warning("No items for %s, skipping briefing", label)
            return None
        logger.info("> Generating briefing for %s...", label)
        try:
            return summarizer.summarize_daily(label, list(items)[:DAILY_TITLE_LIMIT])
        except Exception as e:
            logger.error("Briefing generation failed for %s: %s", label, e)
            return None

    size = max(1, int(concurrency or 1))
    for batch in _chunks(list(tasks), size):
        with _fut.ThreadPoolExecutor(max_workers=len(batch)) as ex:
            results = list(ex.map(_one, batch))
        for (key, label, items), text in zip(batch, results):
            if text:
                briefings[key] = text
                logger.info("Briefing created for %s", label)
            elif items:
                logger.warning("Briefing generation returned nothing for %s", label)
    return briefings


def cap_window(window: Sequence[ArchiveRecord], limit: int = WEEKLY_TITLE_LIMIT) -> List[ArchiveRecord]:
    """Keep only the first ``limit`` items of each archived day."""
    return [ArchiveRecord(date=day.date, items=day.items[:limit]) for day in window]
