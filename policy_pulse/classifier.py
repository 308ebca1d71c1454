from __future__ import annotations

from typing import Iterable, List, Tuple

from .models import PlanTag


# Five-year-plan focus areas and the keywords that flag a story as related.
_PLAN_CATEGORIES: Tuple[Tuple[PlanTag, Tuple[str, ...]], ...] = (
    (PlanTag("innovation", "科技创新", "🔬", "#3b82f6"),
     ("科技", "创新", "芯片", "人工智能", "研发", "数字经济", "新质生产力")),
    (PlanTag("economy", "经济发展", "📈", "#f59e0b"),
     ("经济", "消费", "投资", "金融", "GDP", "外贸", "市场", "产业")),
    (PlanTag("green", "绿色低碳", "🌱", "#10b981"),
     ("绿色", "低碳", "碳达峰", "碳中和", "生态", "环保", "新能源")),
    (PlanTag("livelihood", "民生保障", "🏠", "#ec4899"),
     ("民生", "就业", "养老", "医疗", "教育", "住房", "社保")),
    (PlanTag("rural", "乡村振兴", "🌾", "#84cc16"),
     ("乡村", "农业", "农村", "粮食", "三农")),
    (PlanTag("rule_of_law", "法治建设", "⚖️", "#6366f1"),
     ("法治", "法律", "司法", "依法", "反腐", "纪检")),
    (PlanTag("security", "国家安全", "🛡️", "#dc2626"),
     ("国家安全", "国防", "军队", "军事", "安全")),
    (PlanTag("opening", "对外开放", "🌐", "#0ea5e9"),
     ("开放", "一带一路", "自贸", "合作", "外交")),
)


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    t = text.lower()
    return any(k.lower() in t for k in keywords)


def match_plan_tags(title: str, snippet: str = "") -> List[PlanTag]:
    """
    Return the plan tags whose keywords occur in ``title`` or ``snippet``.

    Tags come back in table order, each at most once.
    """
    text = f"{title} {snippet}"
    return [tag for tag, keywords in _PLAN_CATEGORIES if _contains_any(text, keywords)]


def plan_tags() -> List[PlanTag]:
    return [tag for tag, _ in _PLAN_CATEGORIES]
