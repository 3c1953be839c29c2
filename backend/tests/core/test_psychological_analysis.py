from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend.app.schemas.assessments import CategoryRatings, DailyAssessment
from backend.app.services import psychological_analysis as pa

DAY1 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
DAY2 = DAY1 + timedelta(days=1)


def _assessment(user_id: str, value: int, when: datetime = DAY1, **overrides: int) -> DailyAssessment:
    values = {name: value for name in CategoryRatings.model_fields}
    values.update(overrides)
    return DailyAssessment(user_id=user_id, date=when, ratings=CategoryRatings(**values))


def test_profile_requires_both_histories() -> None:
    assert pa.build_psychological_profile([], [_assessment("p", 7)]) is None
    assert pa.build_psychological_profile([_assessment("u", 7)], []) is None


def test_top_ratings_reach_consolidation() -> None:
    profile = pa.build_psychological_profile([_assessment("u", 10)], [_assessment("p", 10)])

    assert profile is not None
    assert profile.scale_averages == {scale: 5.0 for scale in pa.SCALE_SOURCES}
    dynamics = profile.emotional_dynamics
    assert dynamics.emotional_security == pytest.approx(5.0)
    assert dynamics.intimacy_balance.score == 5.0
    assert dynamics.intimacy_balance.areas.emotional == 5.0
    assert dynamics.intimacy_balance.areas.physical == pytest.approx(4.0)
    assert dynamics.intimacy_balance.areas.shared == pytest.approx(4.5)
    assert dynamics.conflict_resolution.style == "collaborative"
    assert dynamics.conflict_resolution.patterns == []
    assert profile.relationship_stage.current == "Consolidação"
    assert profile.relationship_stage.next_stage == "Expansão"
    assert profile.growth_areas == []
    assert "Consenso (5.0/5)" in profile.strengths
    assert len(profile.strengths) == 6


def test_divergent_low_ratings_show_adjustment_and_alignment_areas() -> None:
    profile = pa.build_psychological_profile([_assessment("u", 2)], [_assessment("p", 8)])

    assert profile is not None
    assert profile.scale_averages["affection"] == pytest.approx(2.5)
    assert profile.relationship_stage.current == "Ajuste"
    assert all(d.significance == "high" and d.difference == 6 for d in profile.discrepancies)
    assert "Desenvolvimento em Afeto" in profile.growth_areas
    assert "Alinhamento em Comunicação" in profile.growth_areas
    assert len(profile.growth_areas) == 6 + 13
    assert profile.strengths == []
    conflict = profile.emotional_dynamics.conflict_resolution
    assert conflict.style == "avoiding"
    assert conflict.effectiveness == pytest.approx(2.5)
    assert conflict.patterns == ["Percepção divergente sobre resolução de conflitos"]


def test_middle_ratings_are_in_development() -> None:
    profile = pa.build_psychological_profile([_assessment("u", 7)], [_assessment("p", 7)])

    assert profile is not None
    assert profile.relationship_stage.current == "Desenvolvimento"
    assert profile.emotional_dynamics.conflict_resolution.style == "compromising"


def test_low_conflict_and_communication_is_confrontational() -> None:
    conflict = pa.analyze_conflict_style(
        _assessment("u", 7, resolucao_conflitos=4, comunicacao=4),
        _assessment("p", 7, resolucao_conflitos=4, comunicacao=5),
    )

    assert conflict.style == "confrontational"
    assert conflict.effectiveness == pytest.approx(2.0)
    assert conflict.patterns == ["Dificuldade mútua na comunicação durante conflitos"]


def test_affection_scale_averages_emotional_and_physical() -> None:
    averages = pa.calculate_scale_averages(
        [_assessment("u", 6, conexao_emocional=10, intimidade_fisica=6)],
        [_assessment("p", 6, conexao_emocional=10, intimidade_fisica=6)],
    )

    assert averages["affection"] == pytest.approx(4.0)
    assert averages["consensus"] == pytest.approx(3.0)


def test_conflict_style_uses_latest_assessment() -> None:
    user_history = [
        _assessment("u", 10, DAY2),
        _assessment("u", 10, DAY1, resolucao_conflitos=2),
    ]

    profile = pa.build_psychological_profile(user_history, [_assessment("p", 10, DAY2)])

    assert profile is not None
    assert profile.emotional_dynamics.conflict_resolution.style == "collaborative"
    assert profile.scale_averages["conflict"] == pytest.approx((5 + 1 + 5) / 3)
