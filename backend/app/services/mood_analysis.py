from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from datetime import timezone

from ..schemas.assessments import CategoryRatings
from ..schemas.moods import (
    ActivityCorrelation,
    CategoryCorrelation,
    MoodAnalysis,
    MoodCorrelations,
    MoodEntry,
    MoodFrequency,
    MoodInsight,
    MoodMetrics,
    MoodPatterns,
    MoodTransition,
    MoodType,
    Timeframe,
)

POSITIVE_MOODS: tuple[MoodType, ...] = (
    MoodType.FELIZ,
    MoodType.ANIMADO,
    MoodType.GRATO,
    MoodType.CALMO,
    MoodType.SATISFEITO,
    MoodType.AMADO,
)
NEGATIVE_MOODS: tuple[MoodType, ...] = (
    MoodType.ANSIOSO,
    MoodType.ESTRESSADO,
    MoodType.TRISTE,
    MoodType.IRRITADO,
    MoodType.FRUSTRADO,
    MoodType.EXAUSTO,
    MoodType.CONFUSO,
    MoodType.SOLITARIO,
)
# 'esperançoso'는 어느 쪽에도 속하지 않음 (중립 취급)

HIGH_VARIABILITY_THRESHOLD = 0.7
LOW_RESILIENCE_THRESHOLD = 0.3

_DAY_PERIODS = (
    (0, 6, "madrugada"),
    (6, 12, "manhã"),
    (12, 18, "tarde"),
    (18, 24, "noite"),
)


def is_positive(mood: MoodType) -> bool:
    return mood in POSITIVE_MOODS


def is_negative(mood: MoodType) -> bool:
    return mood in NEGATIVE_MOODS


def calculate_emotional_variability(entries: Sequence[MoodEntry]) -> float:
    """인접 기록 간 강도 차이 평균을 5로 나눈 값 (최대 1)"""
    if len(entries) < 2:
        return 0.0
    total = sum(abs(entries[i].mood.intensity - entries[i - 1].mood.intensity) for i in range(1, len(entries)))
    return min(total / (len(entries) - 1) / 5, 1.0)


def calculate_mood_stability(entries: Sequence[MoodEntry]) -> float:
    if len(entries) < 2:
        return 1.0
    changes = sum(1 for i in range(1, len(entries)) if entries[i].mood.primary != entries[i - 1].mood.primary)
    return 1 - changes / (len(entries) - 1)


def calculate_recovery_resilience(entries: Sequence[MoodEntry]) -> float:
    """부정 → 긍정 전환 비율. 부정 기분이 한 번도 없으면 1"""
    if len(entries) < 2:
        return 1.0
    recoveries = 0
    negative_antecedents = 0
    for i in range(1, len(entries)):
        previous = entries[i - 1].mood.primary
        if is_negative(previous):
            negative_antecedents += 1
            if is_positive(entries[i].mood.primary):
                recoveries += 1
    return recoveries / negative_antecedents if negative_antecedents else 1.0


def calculate_positive_negative_ratio(entries: Sequence[MoodEntry]) -> float:
    positives = sum(1 for e in entries if is_positive(e.mood.primary))
    negatives = sum(1 for e in entries if is_negative(e.mood.primary))
    if negatives == 0:
        return float(positives)
    return positives / negatives


def _activity_mood_counts(entries: Sequence[MoodEntry]) -> dict[str, dict[MoodType, int]]:
    counts: dict[str, dict[MoodType, int]] = {}
    for entry in entries:
        if not entry.context or not entry.context.activities:
            continue
        for activity in entry.context.activities:
            mood_counts = counts.setdefault(activity, {})
            mood_counts[entry.mood.primary] = mood_counts.get(entry.mood.primary, 0) + 1
    return counts


def _dominant_mood(mood_counts: dict[MoodType, int]) -> MoodType:
    # 동률이면 나중에 등장한 기분이 남는다
    items = iter(mood_counts.items())
    best = next(items)
    for candidate in items:
        best = best if best[1] > candidate[1] else candidate
    return best[0]


def correlate_activities(entries: Sequence[MoodEntry]) -> list[ActivityCorrelation]:
    correlations: list[ActivityCorrelation] = []
    for activity, mood_counts in _activity_mood_counts(entries).items():
        correlations.append(
            ActivityCorrelation(
                activity=activity,
                dominant_mood=_dominant_mood(mood_counts),
                occurrences=sum(mood_counts.values()),
                mood_counts={mood.value: count for mood, count in mood_counts.items()},
            )
        )
    return correlations


def _pearson(x: Sequence[float], y: Sequence[float]) -> float:
    n = min(len(x), len(y))
    if n == 0:
        return 0.0
    x, y = x[:n], y[:n]
    sum_x = sum(x)
    sum_y = sum(y)
    sum_x_sq = sum(v * v for v in x)
    sum_y_sq = sum(v * v for v in y)
    p_sum = sum(a * b for a, b in zip(x, y))

    num = p_sum - (sum_x * sum_y / n)
    den_sq = (sum_x_sq - sum_x * sum_x / n) * (sum_y_sq - sum_y * sum_y / n)
    if den_sq <= 0:
        return 0.0
    return num / math.sqrt(den_sq)


def correlate_with_categories(
    entries: Sequence[MoodEntry], ratings: Sequence[CategoryRatings]
) -> list[CategoryCorrelation]:
    """기분 점수(긍정 +강도, 그 외 -강도)와 영역별 점수의 피어슨 상관계수"""
    if not ratings:
        return []
    mood_scores = [e.mood.intensity if is_positive(e.mood.primary) else -e.mood.intensity for e in entries]
    correlations: list[CategoryCorrelation] = []
    for category in CategoryRatings.model_fields:
        category_scores = [getattr(r, category) for r in ratings]
        correlations.append(CategoryCorrelation(category=category, correlation=_pearson(mood_scores, category_scores)))
    return correlations


def _dominant_moods(entries: Sequence[MoodEntry]) -> list[MoodFrequency]:
    counter = Counter(e.mood.primary for e in entries)
    return [MoodFrequency(mood=mood, count=count) for mood, count in counter.most_common()]


def _mood_transitions(entries: Sequence[MoodEntry]) -> list[MoodTransition]:
    counter: Counter[tuple[MoodType, MoodType]] = Counter()
    for i in range(1, len(entries)):
        previous, current = entries[i - 1].mood.primary, entries[i].mood.primary
        if previous != current:
            counter[(previous, current)] += 1
    return [MoodTransition(from_mood=a, to_mood=b, count=count) for (a, b), count in counter.most_common()]


def _day_period(hour: int) -> str:
    for start, end, label in _DAY_PERIODS:
        if start <= hour < end:
            return label
    return "noite"


def _time_patterns(entries: Sequence[MoodEntry]) -> dict[str, MoodType]:
    by_period: dict[str, Counter[MoodType]] = {}
    for entry in entries:
        ts = entry.timestamp
        if ts.tzinfo is not None:
            ts = ts.astimezone(timezone.utc)
        by_period.setdefault(_day_period(ts.hour), Counter())[entry.mood.primary] += 1
    return {period: counter.most_common(1)[0][0] for period, counter in by_period.items()}


def generate_mood_insights(entries: Sequence[MoodEntry], metrics: MoodMetrics) -> list[MoodInsight]:
    insights: list[MoodInsight] = []

    if metrics.emotional_variability > HIGH_VARIABILITY_THRESHOLD:
        insights.append(
            MoodInsight(
                type="pattern",
                description="Alta variabilidade emocional detectada",
                confidence=0.8,
                recommendation="Considere práticas de estabilização emocional como meditação ou mindfulness",
            )
        )

    for correlation in correlate_activities(entries):
        if is_positive(correlation.dominant_mood):
            insights.append(
                MoodInsight(
                    type="improvement",
                    description=f'A atividade "{correlation.activity}" está frequentemente associada a humor positivo',
                    confidence=0.7,
                    recommendation=f'Considere aumentar a frequência de "{correlation.activity}" para melhorar seu bem-estar',
                )
            )

    if metrics.recovery_resilience < LOW_RESILIENCE_THRESHOLD:
        insights.append(
            MoodInsight(
                type="warning",
                description="Baixa resiliência emocional detectada",
                confidence=0.75,
                recommendation="Desenvolva estratégias de recuperação emocional e considere suporte profissional",
            )
        )

    return insights


def analyze_mood_patterns(
    entries: Sequence[MoodEntry],
    timeframe: Timeframe,
    assessments: Sequence[CategoryRatings] | None = None,
) -> MoodAnalysis | None:
    """
    기분 기록 목록으로부터 패턴/지표/인사이트를 계산합니다.

    인접 기록 비교는 입력 순서를 그대로 따르므로 호출 측에서 시간순 정렬이 필요합니다.
    빈 목록이면 None을 반환합니다.
    """
    if not entries:
        return None

    metrics = MoodMetrics(
        emotional_variability=calculate_emotional_variability(entries),
        positive_negative_ratio=calculate_positive_negative_ratio(entries),
        recovery_resilience=calculate_recovery_resilience(entries),
        mood_stability=calculate_mood_stability(entries),
    )

    return MoodAnalysis(
        timeframe=timeframe,
        entry_count=len(entries),
        patterns=MoodPatterns(
            dominant_moods=_dominant_moods(entries),
            mood_transitions=_mood_transitions(entries),
            time_patterns=_time_patterns(entries),
        ),
        correlations=MoodCorrelations(
            activities=correlate_activities(entries),
            categories=correlate_with_categories(entries, assessments or []),
        ),
        insights=generate_mood_insights(entries, metrics),
        metrics=metrics,
    )
