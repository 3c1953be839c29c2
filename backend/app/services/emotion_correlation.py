"""
두 사람의 기분 기록을 시간 기준으로 짝지어 정서적 동기화 정도를 계산합니다.

유사도 점수는 휴리스틱이며 [0, 1]로 잘라내지 않습니다. 이후 임계값들이
음수나 1 초과 값을 전제로 맞춰져 있으므로 계산식을 그대로 유지해야 합니다.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta, timezone

from ..schemas.analysis import (
    ImpactLevel,
    MoodDiscrepancy,
    RelationshipAnalysis,
    RelationshipInsight,
)
from ..schemas.moods import MoodEntry, MoodState
from .mood_analysis import is_negative, is_positive

logger = logging.getLogger(__name__)

PAIRING_WINDOW = timedelta(hours=24)

EMOTIONAL_SYNC_THRESHOLD = 0.6
NEGATIVE_AFFECT_THRESHOLD = 0.7
DISCREPANCY_THRESHOLD = 0.3
DISCONNECTION_SIMILARITY = 0.2
DISCONNECTION_RUN = 3
LOW_SYNC_RECOMMENDATION_THRESHOLD = 0.4

LOW_SYNC_RECOMMENDATIONS = (
    "Pratique escuta ativa e validação emocional",
    "Estabeleça momentos diários de conexão emocional",
    "Considere terapia de casal para melhorar a comunicação emocional",
)
HIGH_DISCREPANCY_RECOMMENDATIONS = (
    "Desenvolva rituais de reconexão após momentos de discrepância emocional",
    "Pratique exercícios de empatia e compreensão mútua",
)


def _epoch(entry: MoodEntry) -> float:
    ts = entry.timestamp
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()


def find_closest_entry(
    entry: MoodEntry, candidates: Sequence[MoodEntry], window: timedelta = PAIRING_WINDOW
) -> MoodEntry | None:
    """window 안에서 시간 차가 가장 작은 상대 기록. 동률이면 먼저 나온 기록"""
    target = _epoch(entry)
    limit = window.total_seconds()
    closest: MoodEntry | None = None
    min_diff = float("inf")
    for candidate in candidates:
        diff = abs(_epoch(candidate) - target)
        if diff < min_diff and diff < limit:
            min_diff = diff
            closest = candidate
    return closest


def calculate_mood_similarity(mood1: MoodState, mood2: MoodState) -> float:
    same_category = (is_positive(mood1.primary) and is_positive(mood2.primary)) or (
        is_negative(mood1.primary) and is_negative(mood2.primary)
    )
    intensity_diff = abs(mood1.intensity - mood2.intensity) / 5

    secondary_score = 0.0
    if mood1.secondary and mood2.secondary:
        common = [m for m in mood1.secondary if m in mood2.secondary]
        secondary_score = len(common) / max(len(mood1.secondary), len(mood2.secondary))

    if same_category:
        return 1 - intensity_diff + secondary_score * 0.2
    return 0.3 - intensity_diff + secondary_score * 0.1


def pair_entries(
    user_entries: Sequence[MoodEntry],
    partner_entries: Sequence[MoodEntry],
    window: timedelta = PAIRING_WINDOW,
) -> list[tuple[MoodEntry, MoodEntry | None]]:
    """사용자 기록마다 가장 가까운 상대 기록 (없으면 None)"""
    return [(entry, find_closest_entry(entry, partner_entries, window)) for entry in user_entries]


def calculate_emotional_sync(pairs: Sequence[tuple[MoodEntry, MoodEntry | None]]) -> float:
    scores = [calculate_mood_similarity(u.mood, p.mood) for u, p in pairs if p is not None]
    return sum(scores) / len(scores) if scores else 0.0


def classify_discrepancy(level: float) -> ImpactLevel:
    if level > 0.7:
        return "alto"
    if level > 0.5:
        return "médio"
    return "baixo"


def analyze_mood_discrepancies(pairs: Sequence[tuple[MoodEntry, MoodEntry | None]]) -> list[MoodDiscrepancy]:
    discrepancies: list[MoodDiscrepancy] = []
    for user_entry, partner_entry in pairs:
        if partner_entry is None:
            continue
        level = 1 - calculate_mood_similarity(user_entry.mood, partner_entry.mood)
        if level > DISCREPANCY_THRESHOLD:
            discrepancies.append(
                MoodDiscrepancy(
                    timestamp=user_entry.timestamp,
                    user_mood=user_entry.mood,
                    partner_mood=partner_entry.mood,
                    impact=classify_discrepancy(level),
                )
            )
    return discrepancies


def calculate_negativity_ratio(user_entries: Sequence[MoodEntry], partner_entries: Sequence[MoodEntry]) -> float:
    all_entries = [*user_entries, *partner_entries]
    if not all_entries:
        return 0.0
    negatives = sum(1 for e in all_entries if is_negative(e.mood.primary))
    return negatives / len(all_entries)


def detect_emotional_disconnection(pairs: Sequence[tuple[MoodEntry, MoodEntry | None]]) -> bool:
    run = 0
    for user_entry, partner_entry in pairs:
        if partner_entry is not None and (
            calculate_mood_similarity(user_entry.mood, partner_entry.mood) < DISCONNECTION_SIMILARITY
        ):
            run += 1
            if run >= DISCONNECTION_RUN:
                return True
        else:
            run = 0
    return False


def detect_negative_patterns(
    user_entries: Sequence[MoodEntry],
    partner_entries: Sequence[MoodEntry],
    pairs: Sequence[tuple[MoodEntry, MoodEntry | None]],
) -> list[str]:
    patterns: list[str] = []
    if calculate_negativity_ratio(user_entries, partner_entries) > NEGATIVE_AFFECT_THRESHOLD:
        patterns.append("Alto índice de interações negativas detectado")
    if detect_emotional_disconnection(pairs):
        patterns.append("Padrão de desconexão emocional identificado")
    return patterns


def _generate_recommendations(analysis: RelationshipAnalysis) -> None:
    # sync가 정확히 0이면 (짝이 하나도 없음) 권고를 만들지 않음
    if analysis.emotional_sync and analysis.emotional_sync < LOW_SYNC_RECOMMENDATION_THRESHOLD:
        analysis.recommendations.extend(LOW_SYNC_RECOMMENDATIONS)
    if any(d.impact == "alto" for d in analysis.mood_discrepancies):
        analysis.recommendations.extend(HIGH_DISCREPANCY_RECOMMENDATIONS)


def analyze_relationship_emotions(
    user_entries: Sequence[MoodEntry],
    partner_entries: Sequence[MoodEntry],
    window: timedelta = PAIRING_WINDOW,
) -> RelationshipAnalysis:
    """
    두 사람의 기분 기록으로 관계 분석 객체를 만듭니다.

    항상 모든 필드가 채워진 객체를 반환하며, 입력이 비어 있으면 0/빈 목록 기본값이 남습니다.
    짝짓기는 사용자 → 상대 방향으로만 이뤄지므로 인자 순서를 바꾸면 결과가 달라질 수 있습니다.
    """
    analysis = RelationshipAnalysis()
    pairs = pair_entries(user_entries, partner_entries, window)

    analysis.emotional_sync = calculate_emotional_sync(pairs)
    analysis.mood_discrepancies = analyze_mood_discrepancies(pairs)

    if analysis.emotional_sync and analysis.emotional_sync < EMOTIONAL_SYNC_THRESHOLD:
        analysis.insights.append(
            RelationshipInsight(
                type="warning",
                description="Baixa sincronização emocional detectada",
                recommendation="Considere aumentar momentos de conexão e comunicação emocional",
            )
        )

    analysis.risk_factors.extend(detect_negative_patterns(user_entries, partner_entries, pairs))
    _generate_recommendations(analysis)

    logger.debug(
        "emotion correlation: %d/%d paired, sync=%.3f, discrepancies=%d",
        sum(1 for _, p in pairs if p is not None),
        len(pairs),
        analysis.emotional_sync,
        len(analysis.mood_discrepancies),
    )
    return analysis
