"""Rule-table query classifier: maps raw user text to a cost/quality tier.

Each rule votes for a tier with a weight. Premium is chosen only when the
premium vote reaches ``PREMIUM_THRESHOLD`` and beats the standard vote;
everything else, including the empty string, is Standard. The module holds no
state and does no I/O, so ``classify`` is a pure function of its input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from econchat.core.types import Tier

PREMIUM_THRESHOLD = 2
LONG_QUERY_WORDS = 30


@dataclass(frozen=True, slots=True)
class ClassifierRule:
    label: str
    tier: Tier
    weight: int
    matches: Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class Classification:
    tier: Tier
    premium_score: int
    standard_score: int
    matched: tuple[str, ...]


def _phrase(*phrases: str) -> Callable[[str], bool]:
    pattern = re.compile(r"\b(?:" + "|".join(re.escape(p) for p in phrases) + r")\b")
    return lambda text: pattern.search(text) is not None


def _regex(expr: str) -> Callable[[str], bool]:
    pattern = re.compile(expr)
    return lambda text: pattern.search(text) is not None


_SUMMARY = re.compile(r"\b(?:summary|summari[sz]e|overview|snapshot|profile)\b")
_MULTI_INDICATOR = re.compile(
    r"\b(?:key|main|major)\s+(?:indicators|metrics|statistics|figures)\b"
    r"|\bindicators\b|\bmetrics\b|\beconomic\s+(?:overview|summary|profile)\b"
)
_COMPLEXITY_WORDS = (
    "countries", "nations", "economies",
    "africa", "asia", "europe", "americas",
    "ecowas", "sadc", "eac", "comesa",
    "g20", "g7", "brics", "oecd",
    "developing", "emerging", "frontier",
)


def _multi_indicator_summary(text: str) -> bool:
    return _SUMMARY.search(text) is not None and _MULTI_INDICATOR.search(text) is not None


def _long_request(text: str) -> bool:
    return len(text.split()) > LONG_QUERY_WORDS


def _many_entities(text: str) -> bool:
    score = sum(1 for word in _COMPLEXITY_WORDS if re.search(rf"\b{word}\b", text))
    mentions = text.count(",") + len(re.findall(r"\band\b", text))
    return score >= 2 or mentions >= 2


RULES: tuple[ClassifierRule, ...] = (
    # diagnostic frameworks
    ClassifierRule("debt_sustainability", Tier.PREMIUM, 3, _phrase("debt sustainability", "dsa", "debt dynamics")),
    ClassifierRule(
        "growth_diagnostics",
        Tier.PREMIUM,
        3,
        _phrase("growth diagnostic", "growth diagnostics", "binding constraint", "binding constraints"),
    ),
    ClassifierRule("hrv", Tier.PREMIUM, 3, _phrase("hausmann", "rodrik", "velasco", "hrv")),
    ClassifierRule(
        "frameworks",
        Tier.PREMIUM,
        3,
        _phrase("macroeconomic framework", "fiscal framework", "structural reform", "policy implications"),
    ),
    ClassifierRule(
        "documents",
        Tier.PREMIUM,
        3,
        _phrase("country economic brief", "write a brief", "create a report", "draft a", "economic outlook"),
    ),
    # deep reasoning
    ClassifierRule(
        "analysis",
        Tier.PREMIUM,
        2,
        _phrase("analysis", "analyze", "analyse", "diagnostic", "assessment", "assess the impact", "evaluate"),
    ),
    ClassifierRule("sustainability", Tier.PREMIUM, 2, _phrase("sustainability", "sustainable")),
    ClassifierRule(
        "reasoning",
        Tier.PREMIUM,
        2,
        _phrase("explain why", "implications", "recommend", "recommendations", "scenario", "scenarios"),
    ),
    ClassifierRule("horizon", Tier.PREMIUM, 2, _phrase("long-term", "medium-term outlook", "report", "brief")),
    ClassifierRule("multi_indicator_summary", Tier.PREMIUM, 2, _multi_indicator_summary),
    ClassifierRule("long_request", Tier.PREMIUM, 2, _long_request),
    # standard work: lookups, comparisons, trends
    ClassifierRule(
        "comparison",
        Tier.STANDARD,
        1,
        _phrase("compare", "comparison", "versus", "vs", "relative to", "compared to", "against"),
    ),
    ClassifierRule(
        "trend",
        Tier.STANDARD,
        1,
        _phrase("trend", "trends", "over time", "historical", "trajectory", "evolution", "changed", "how has", "how have"),
    ),
    ClassifierRule("summary", Tier.STANDARD, 1, _phrase("summarize", "summarise", "summary", "overview", "synthesis")),
    ClassifierRule("aggregate", Tier.STANDARD, 1, _phrase("average", "total", "aggregate", "combined")),
    ClassifierRule("time_range", Tier.STANDARD, 1, _regex(r"\bsince\b|\bfrom\b.+\bto\b|\bbetween\b.+\band\b")),
    ClassifierRule("many_entities", Tier.STANDARD, 1, _many_entities),
)


def explain(text: str, rules: tuple[ClassifierRule, ...] = RULES) -> Classification:
    """Score ``text`` against ``rules`` and return the tier with its evidence."""
    lowered = (text or "").lower()
    premium = standard = 0
    matched: list[str] = []
    for rule in rules:
        if not rule.matches(lowered):
            continue
        matched.append(rule.label)
        if rule.tier is Tier.PREMIUM:
            premium += rule.weight
        else:
            standard += rule.weight

    tier = Tier.PREMIUM if premium >= PREMIUM_THRESHOLD and premium > standard else Tier.STANDARD
    return Classification(tier=tier, premium_score=premium, standard_score=standard, matched=tuple(matched))


def classify(text: str, override: Optional[Tier] = None) -> Tier:
    """Return the tier for ``text``; an explicit ``override`` always wins."""
    if override is not None:
        return Tier(override)
    return explain(text).tier
