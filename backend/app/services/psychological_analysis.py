"""
두 사람의 평가 이력으로 관계의 심리적 지표를 계산합니다.

1~10 점수는 0~5 척도로 절반 환산한 뒤 여섯 개 관계 척도로 묶습니다.
척도별 임계값(3, 4)은 모두 환산된 값 기준입니다.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from statistics import fmean

from ..schemas.analysis import ConflictResolution, EmotionalDynamics, IntimacyAreas, IntimacyBalance
from ..schemas.assessments import CATEGORY_LABELS, CategoryRatings, DailyAssessment
from ..schemas.insights import CategoryDiscrepancy, PsychologicalProfile, RelationshipStage, Significance

logger = logging.getLogger(__name__)

HALF_SCALE = 0.5
MAX_SCALE = 5.0

# 척도 → 원본 평가 영역
SCALE_SOURCES: dict[str, tuple[str, ...]] = {
    "consensus": ("alinhamento_objetivos",),
    "affection": ("conexao_emocional", "intimidade_fisica"),
    "cohesion": ("qualidade_tempo",),
    "satisfaction": ("satisfacao_geral",),
    "conflict": ("resolucao_conflitos",),
    "general": ("saude_mental", "autocuidado"),
}

SCALE_LABELS: dict[str, str] = {
    "consensus": "Consenso",
    "affection": "Afeto",
    "cohesion": "Coesão",
    "satisfaction": "Satisfação",
    "conflict": "Resolução de Conflitos",
    "general": "Bem-estar Geral",
}

_STAGES: dict[str, RelationshipStage] = {
    "Consolidação": RelationshipStage(
        current="Consolidação",
        challenges=["Manter o crescimento", "Evitar acomodação"],
        opportunities=["Aprofundar intimidade", "Planejar futuro conjunto"],
        next_stage="Expansão",
    ),
    "Desenvolvimento": RelationshipStage(
        current="Desenvolvimento",
        challenges=["Alinhar expectativas", "Gerenciar diferenças"],
        opportunities=["Fortalecer comunicação", "Construir confiança"],
        next_stage="Consolidação",
    ),
    "Ajuste": RelationshipStage(
        current="Ajuste",
        challenges=["Estabelecer padrões saudáveis", "Superar inseguranças"],
        opportunities=["Desenvolver entendimento mútuo", "Criar base segura"],
        next_stage="Desenvolvimento",
    ),
}


def _scale_value(ratings: CategoryRatings, scale: str) -> float:
    values = ratings.model_dump()
    return fmean(values[name] for name in SCALE_SOURCES[scale]) * HALF_SCALE


def calculate_scale_averages(
    user_history: Sequence[DailyAssessment], partner_history: Sequence[DailyAssessment]
) -> dict[str, float]:
    """두 사람의 모든 평가를 합쳐 척도별 평균. 기록이 없으면 0"""
    assessments = [*user_history, *partner_history]
    if not assessments:
        return {scale: 0.0 for scale in SCALE_SOURCES}
    return {scale: fmean(_scale_value(a.ratings, scale) for a in assessments) for scale in SCALE_SOURCES}


def analyze_category_discrepancies(
    user_history: Sequence[DailyAssessment], partner_history: Sequence[DailyAssessment]
) -> list[CategoryDiscrepancy]:
    """영역별 평균 점수 차이. 2 이상 high, 1 이상 medium"""
    if not user_history or not partner_history:
        return []
    results: list[CategoryDiscrepancy] = []
    for category in CategoryRatings.model_fields:
        user_avg = fmean(getattr(a.ratings, category) for a in user_history)
        partner_avg = fmean(getattr(a.ratings, category) for a in partner_history)
        difference = abs(user_avg - partner_avg)
        significance: Significance = "high" if difference >= 2 else "medium" if difference >= 1 else "low"
        results.append(CategoryDiscrepancy(category=category, difference=difference, significance=significance))
    results.sort(key=lambda d: d.difference, reverse=True)
    return results


def calculate_emotional_security(averages: dict[str, float]) -> float:
    return min(
        MAX_SCALE,
        averages["satisfaction"] * 0.3
        + averages["affection"] * 0.3
        + averages["consensus"] * 0.2
        + averages["cohesion"] * 0.2,
    )


def analyze_intimacy_balance(averages: dict[str, float]) -> IntimacyBalance:
    affection = averages["affection"]
    cohesion = averages["cohesion"]
    return IntimacyBalance(
        score=min(MAX_SCALE, affection),
        areas=IntimacyAreas(
            emotional=min(MAX_SCALE, affection * 1.2),
            physical=min(MAX_SCALE, affection * 0.8),
            intellectual=min(MAX_SCALE, cohesion),
            shared=min(MAX_SCALE, cohesion * 0.9),
        ),
    )


def determine_conflict_patterns(user_latest: DailyAssessment, partner_latest: DailyAssessment) -> list[str]:
    patterns: list[str] = []
    user_conflict = user_latest.ratings.resolucao_conflitos * HALF_SCALE
    partner_conflict = partner_latest.ratings.resolucao_conflitos * HALF_SCALE
    if abs(user_conflict - partner_conflict) > 2:
        patterns.append("Percepção divergente sobre resolução de conflitos")
    if user_latest.ratings.comunicacao * HALF_SCALE < 3 and partner_latest.ratings.comunicacao * HALF_SCALE < 3:
        patterns.append("Dificuldade mútua na comunicação durante conflitos")
    return patterns


def analyze_conflict_style(user_latest: DailyAssessment, partner_latest: DailyAssessment) -> ConflictResolution:
    score = min(
        MAX_SCALE,
        (user_latest.ratings.resolucao_conflitos + partner_latest.ratings.resolucao_conflitos) / 2 * HALF_SCALE,
    )
    if score > 4:
        style = "collaborative"
    elif score > 3:
        style = "compromising"
    elif score > 2:
        style = "avoiding"
    else:
        style = "confrontational"
    return ConflictResolution(
        style=style,
        effectiveness=score,
        patterns=determine_conflict_patterns(user_latest, partner_latest),
    )


def determine_relationship_stage(
    averages: dict[str, float], discrepancies: Sequence[CategoryDiscrepancy]
) -> RelationshipStage:
    overall = fmean(averages.values())
    has_high = any(d.significance == "high" for d in discrepancies)
    if overall > 4 and not has_high:
        return _STAGES["Consolidação"].model_copy(deep=True)
    if overall > 3:
        return _STAGES["Desenvolvimento"].model_copy(deep=True)
    return _STAGES["Ajuste"].model_copy(deep=True)


def identify_growth_areas(averages: dict[str, float], discrepancies: Sequence[CategoryDiscrepancy]) -> list[str]:
    areas = [f"Desenvolvimento em {SCALE_LABELS[scale]}" for scale, score in averages.items() if score < 3]
    areas.extend(
        f"Alinhamento em {CATEGORY_LABELS[d.category]}" for d in discrepancies if d.significance == "high"
    )
    return areas


def analyze_relationship_strengths(averages: dict[str, float]) -> list[str]:
    return [f"{SCALE_LABELS[scale]} ({score:.1f}/5)" for scale, score in averages.items() if score >= 4]


def analyze_emotional_dynamics(
    averages: dict[str, float], user_latest: DailyAssessment, partner_latest: DailyAssessment
) -> EmotionalDynamics:
    return EmotionalDynamics(
        emotional_security=calculate_emotional_security(averages),
        intimacy_balance=analyze_intimacy_balance(averages),
        conflict_resolution=analyze_conflict_style(user_latest, partner_latest),
    )


def build_psychological_profile(
    user_history: Sequence[DailyAssessment], partner_history: Sequence[DailyAssessment]
) -> PsychologicalProfile | None:
    """
    두 사람 모두 평가가 있어야 계산합니다. 없으면 None.

    갈등 방식은 각자의 가장 최근 평가로, 나머지 지표는 전체 이력 평균으로 계산합니다.
    """
    if not user_history or not partner_history:
        return None

    averages = calculate_scale_averages(user_history, partner_history)
    discrepancies = analyze_category_discrepancies(user_history, partner_history)
    user_latest = max(user_history, key=lambda a: a.date)
    partner_latest = max(partner_history, key=lambda a: a.date)

    profile = PsychologicalProfile(
        scale_averages=averages,
        emotional_dynamics=analyze_emotional_dynamics(averages, user_latest, partner_latest),
        relationship_stage=determine_relationship_stage(averages, discrepancies),
        growth_areas=identify_growth_areas(averages, discrepancies),
        strengths=analyze_relationship_strengths(averages),
        discrepancies=discrepancies,
    )
    logger.debug(
        "psychological profile: stage=%s security=%.2f",
        profile.relationship_stage.current,
        profile.emotional_dynamics.emotional_security,
    )
    return profile
