from __future__ import annotations

import html
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from .classifier import plan_tags
from .models import NewsItem

logger = logging.getLogger(__name__)

_REPORT_RE = re.compile(r"^\d{4}-\d{2}-\d{2}\.html$")


def history_index(output_dir: Path, current: str) -> List[str]:
    """Dated report filenames, newest first, always including ``current``."""
    files = sorted(
        (p.name for p in output_dir.iterdir() if _REPORT_RE.match(p.name)),
        reverse=True,
    ) if output_dir.is_dir() else []
    if current not in files:
        files.insert(0, current)
    return files


def _esc(text: Any) -> str:
    return html.escape(str(text or ""))


def _render_item(item: NewsItem) -> str:
    title = _esc(item.title)
    if item.link:
        title = f'<a href="{_esc(item.link)}" target="_blank" rel="noopener">{title}</a>'
    tags = "".join(
        f'<span class="tag" style="background:{_esc(t.color)}">{_esc(t.icon)} {_esc(t.name)}</span>'
        for t in item.plan_tags
    )
    return (
        "<li>"
        f"<h3>{title}</h3>"
        f'<div class="meta">{_esc(item.feed_name)} · {_esc(item.date)}</div>'
        f"<p>{_esc(item.snippet)}</p>{tags}"
        "</li>"
    )


def render_report(data: Mapping[str, Any], labels: Mapping[str, str]) -> str:
    """
    Minimal static page for one build.

    Briefings and the trend report are Markdown; they are shown preformatted.
    """
    parts: List[str] = []
    trend = data.get("weeklyTrend")
    if trend:
        parts.append(f'<section id="trend"><h2>一周趋势</h2><pre>{_esc(trend)}</pre></section>')
    briefings = data.get("briefings") or {}
    for key, items in (data.get("sources") or {}).items():
        label = _esc(labels.get(key, key))
        section = [f'<section id="{_esc(key)}"><h2>{label}</h2>']
        if key in briefings:
            section.append(f'<pre class="briefing">{_esc(briefings[key])}</pre>')
        section.append("<ul>" + "".join(_render_item(it) for it in items) + "</ul></section>")
        parts.append("".join(section))
    legend = "".join(f"<li>{_esc(t.icon)} {_esc(t.name)}</li>" for t in plan_tags())
    return (
        '<!DOCTYPE html>\n<html lang="zh-CN"><head><meta charset="UTF-8">'
        "<title>政策脉搏 | Policy Pulse</title></head><body>"
        f'<header><h1>政策脉搏</h1><time>{_esc(data.get("timestamp"))}</time></header>'
        + "".join(parts)
        + f'<footer><ul class="legend">{legend}</ul></footer></body></html>\n'
    )


def render_shell(latest: str, history: Sequence[str]) -> str:
    options = "".join(
        f'<option value="{_esc(f)}">{_esc(f[:-len(".html")])}</option>' for f in history
    )
    return (
        '<!DOCTYPE html>\n<html lang="zh-CN"><head><meta charset="UTF-8">'
        "<title>政策脉搏 | Policy Pulse</title></head><body>"
        f'<select id="history-nav" onchange="document.getElementById(\'report\').src=this.value">{options}</select>'
        f'<iframe id="report" src="{_esc(latest)}" style="width:100%;height:95vh;border:0"></iframe>'
        "</body></html>\n"
    )


def publish(
    output_dir: Path,
    date: str,
    data: Dict[str, Any],
    labels: Mapping[str, str],
) -> List[str]:
    """Write ``<date>.html``, ``history.json`` and ``index.html``; return the history."""
    output_dir.mkdir(parents=True, exist_ok=True)
    report = f"{date}.html"
    history = history_index(output_dir, report)

    (output_dir / report).write_text(render_report(data, labels), encoding="utf-8")
    logger.info("Generated %s", report)

    (output_dir / "history.json").write_text(json.dumps(history, indent=2), encoding="utf-8")
    logger.info("Generated history.json")

    (output_dir / "index.html").write_text(render_shell(report, history), encoding="utf-8")
    logger.info("Generated index.html")
    return history
