from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from ..schemas.assessments import (
    CATEGORY_LABELS,
    AssessmentStatistics,
    DailyAssessment,
    RadarPoint,
)

# 차트용 파생 지표: (키, 원본 영역, 배율)
DERIVED_METRICS: tuple[tuple[str, str, float], ...] = (
    ("EmotionalSecurity", "seguranca_relacionamento", 0.5),
    ("IntimacyBalance", "intimidade_fisica", 1.0),
    ("EmotionalConnection", "conexao_emocional", 0.5),
    ("PhysicalIntimacy", "intimidade_fisica", 0.5),
    ("IntellectualConnection", "comunicacao", 0.5),
    ("SharedTime", "qualidade_tempo", 0.5),
    ("ConflictResolution", "resolucao_conflitos", 0.5),
)

INTIMACY_AXES: tuple[tuple[str, str], ...] = (
    ("Emotional", "EmotionalConnection"),
    ("Physical", "PhysicalIntimacy"),
    ("Intellectual", "IntellectualConnection"),
    ("Shared Time", "SharedTime"),
)


def day_key(value: datetime) -> str:
    """UTC 달력 기준 날짜 키 (YYYY-MM-DD)"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date().isoformat()


def series_key(prefix: str, field: str) -> str:
    """'user' + 'conexao_emocional' → 'userConexaoEmocional'"""
    return prefix + "".join(part.capitalize() for part in field.split("_"))


def _side_fields(prefix: str, assessment: DailyAssessment) -> dict[str, float]:
    ratings = assessment.ratings.model_dump()
    fields: dict[str, float] = {series_key(prefix, name): value for name, value in ratings.items()}
    for key, source, scale in DERIVED_METRICS:
        fields[f"{prefix}{key}"] = ratings[source] * scale
    return fields


def merge_time_series(
    user_assessments: Sequence[DailyAssessment],
    partner_assessments: Sequence[DailyAssessment],
) -> list[dict[str, Any]]:
    """
    두 사람의 평가를 날짜별 한 레코드로 합칩니다.

    한쪽만 있는 날짜에는 다른 쪽 키가 아예 없습니다 (0으로 채우지 않음).
    같은 날짜에 여러 건이 있으면 나중 것이 덮어씁니다.
    """
    combined: dict[str, dict[str, Any]] = {}
    for prefix, assessments in (("user", user_assessments), ("partner", partner_assessments)):
        for assessment in assessments:
            key = day_key(assessment.date)
            record = combined.setdefault(key, {"date": key})
            record.update(_side_fields(prefix, assessment))
    return [combined[key] for key in sorted(combined)]


def _latest_value(time_series: Sequence[dict[str, Any]], key: str, offset: int = 0) -> float | None:
    """key가 존재하는 레코드 중 뒤에서 offset번째 값"""
    seen = 0
    for record in reversed(time_series):
        if key in record:
            if seen == offset:
                return record[key]
            seen += 1
    return None


def build_radar_chart(latest: dict[str, Any]) -> list[RadarPoint]:
    return [
        RadarPoint(
            subject=label,
            user=latest.get(series_key("user", field), 0),
            partner=latest.get(series_key("partner", field), 0),
        )
        for field, label in CATEGORY_LABELS.items()
    ]


def build_intimacy_balance(latest: dict[str, Any]) -> list[RadarPoint]:
    return [
        RadarPoint(
            subject=subject,
            user=latest.get(f"user{key}", 0),
            partner=latest.get(f"partner{key}", 0),
        )
        for subject, key in INTIMACY_AXES
    ]


def category_trends(time_series: Sequence[dict[str, Any]], prefix: str) -> dict[str, str]:
    trends: dict[str, str] = {}
    for field in CATEGORY_LABELS:
        key = series_key(prefix, field)
        current = _latest_value(time_series, key)
        previous = _latest_value(time_series, key, offset=1)
        if current is None:
            continue
        if previous is None or current == previous:
            trends[field] = "stable"
        elif current > previous:
            trends[field] = "improving"
        else:
            trends[field] = "declining"
    return trends


def process_assessment_data(
    user_assessments: Sequence[DailyAssessment],
    partner_assessments: Sequence[DailyAssessment],
) -> AssessmentStatistics:
    time_series = merge_time_series(user_assessments, partner_assessments)
    latest = time_series[-1] if time_series else {}
    return AssessmentStatistics(
        time_series=time_series,
        radar_chart=build_radar_chart(latest),
        intimacy_balance=build_intimacy_balance(latest),
        trends={
            "user": category_trends(time_series, "user"),
            "partner": category_trends(time_series, "partner"),
        },
    )
