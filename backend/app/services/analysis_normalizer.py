"""
휴리스틱 분석(RelationshipAnalysis)과 LLM 응답(JSON 문자열 / dict / 자유 텍스트)을
하나의 CanonicalAnalysis 형태로 변환합니다. 저장과 응답은 항상 변환된 형태만 사용합니다.
"""
from __future__ import annotations

import json
from typing import Any

from ..schemas.analysis import (
    AnalysisSource,
    CanonicalAnalysis,
    CategoryAnalysis,
    ConflictResolution,
    EmotionalDynamics,
    HeuristicSource,
    IntimacyAreas,
    IntimacyBalance,
    LLMSource,
    OverallHealth,
    RelationshipDynamics,
    RelationshipInsight,
    StrengthsAndChallenges,
    Trend,
)

_TREND_ALIASES: dict[str, Trend] = {
    "up": "improving",
    "improving": "improving",
    "melhorando": "improving",
    "down": "declining",
    "declining": "declining",
    "piorando": "declining",
}


def strip_code_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```json"):
        raw = raw[7:]
    elif raw.startswith("```"):
        raw = raw[3:]
    if raw.endswith("```"):
        raw = raw[:-3]
    return raw.strip()


def _trend(value: Any) -> Trend:
    return _TREND_ALIASES.get(str(value or "").strip().lower(), "stable")


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value))
    except (TypeError, ValueError):
        return 0.0


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _first_list(content: dict[str, Any], *paths: tuple[str, ...]) -> list[str]:
    """여러 후보 경로 중 처음으로 값이 있는 문자열 목록"""
    for path in paths:
        node: Any = content
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, list) and node:
            return _strings(node)
    return []


def _categories(raw: Any) -> dict[str, CategoryAnalysis]:
    if not isinstance(raw, dict):
        return {}
    categories: dict[str, CategoryAnalysis] = {}
    for name, item in raw.items():
        if not isinstance(item, dict):
            continue
        partner_score = item.get("partnerScore")
        categories[name] = CategoryAnalysis(
            score=_number(item.get("score")),
            partner_score=_number(partner_score) if partner_score is not None else None,
            trend=_trend(item.get("trend")),
            insights=_strings(item.get("insights")),
        )
    return categories


def _emotional_dynamics(raw: Any) -> EmotionalDynamics:
    if not isinstance(raw, dict):
        return EmotionalDynamics()
    intimacy = _dict(raw.get("intimacyBalance"))
    areas = _dict(intimacy.get("areas"))
    conflict = _dict(raw.get("conflictResolution"))
    return EmotionalDynamics(
        emotional_security=_number(raw.get("emotionalSecurity")),
        intimacy_balance=IntimacyBalance(
            score=_number(intimacy.get("score")),
            areas=IntimacyAreas(
                emotional=_number(areas.get("emotional")),
                physical=_number(areas.get("physical")),
                intellectual=_number(areas.get("intellectual")),
                shared=_number(areas.get("shared")),
            ),
        ),
        conflict_resolution=ConflictResolution(
            style=str(conflict.get("style") or "collaborative"),
            effectiveness=_number(conflict.get("effectiveness")),
            patterns=_strings(conflict.get("patterns")),
        ),
    )


def _insights(raw: Any) -> list[RelationshipInsight]:
    if not isinstance(raw, list):
        return []
    insights: list[RelationshipInsight] = []
    for item in raw:
        if isinstance(item, dict) and item.get("description"):
            insights.append(
                RelationshipInsight(
                    type=str(item.get("type", "pattern")),
                    description=str(item["description"]),
                    recommendation=str(item.get("recommendation", "")),
                    confidence=_number(item["confidence"]) if item.get("confidence") is not None else None,
                )
            )
    return insights


def _from_llm_dict(content: dict[str, Any]) -> CanonicalAnalysis:
    overall = _dict(content.get("overallHealth"))
    dynamics = _dict(content.get("relationshipDynamics"))
    text_report = content.get("textReport")
    return CanonicalAnalysis(
        source="llm",
        overall_health=OverallHealth(score=_number(overall.get("score")), trend=_trend(overall.get("trend"))),
        categories=_categories(content.get("categories")),
        strengths_and_challenges=StrengthsAndChallenges(
            strengths=_first_list(
                content,
                ("strengthsAndChallenges", "strengths"),
                ("strengths",),
                ("analysis", "strengthsAndChallenges", "strengths"),
            ),
            challenges=_first_list(
                content,
                ("strengthsAndChallenges", "challenges"),
                ("challenges",),
                ("analysis", "strengthsAndChallenges", "challenges"),
            ),
        ),
        communication_suggestions=_first_list(
            content, ("communicationSuggestions",), ("analysis", "communicationSuggestions")
        ),
        action_items=_first_list(content, ("actionItems",), ("analysis", "actionItems")),
        recommendations=_first_list(content, ("recommendations",), ("analysis", "recommendations")),
        relationship_dynamics=RelationshipDynamics(
            positive_patterns=_strings(dynamics.get("positivePatterns")),
            concerning_patterns=_strings(dynamics.get("concerningPatterns")),
            growth_areas=_strings(dynamics.get("growthAreas")),
            discrepancy_insights=str(dynamics["discrepancyInsights"]) if dynamics.get("discrepancyInsights") else None,
        ),
        emotional_dynamics=_emotional_dynamics(content.get("emotionalDynamics")),
        emotional_sync=_number(content.get("emotionalSync")),
        insights=_insights(content.get("insights")),
        risk_factors=_strings(content.get("riskFactors")),
        text_report=str(text_report) if text_report else None,
    )


def _from_llm(source: LLMSource) -> CanonicalAnalysis:
    content = source.content
    if isinstance(content, str):
        try:
            parsed = json.loads(strip_code_fences(content))
        except json.JSONDecodeError:
            return CanonicalAnalysis(source="llm", text_report=content.strip())
        if not isinstance(parsed, dict):
            return CanonicalAnalysis(source="llm", text_report=content.strip())
        content = parsed
    return _from_llm_dict(content)


def normalize_analysis(source: AnalysisSource) -> CanonicalAnalysis:
    if isinstance(source, HeuristicSource):
        return CanonicalAnalysis(source="heuristic", **source.analysis.model_dump())
    return _from_llm(source)
