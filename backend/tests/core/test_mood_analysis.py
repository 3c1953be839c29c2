from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from backend.app.schemas.assessments import CategoryRatings
from backend.app.schemas.moods import MoodContext, MoodEntry, MoodState, MoodType
from backend.app.services import mood_analysis

BASE = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def _entry(
    mood: MoodType,
    intensity: int,
    minutes: int = 0,
    activities: list[str] | None = None,
) -> MoodEntry:
    return MoodEntry(
        user_id="user-1",
        timestamp=BASE + timedelta(minutes=minutes),
        mood=MoodState(primary=mood, intensity=intensity),
        context=MoodContext(activities=activities) if activities else None,
    )


def _ratings(**overrides: int) -> CategoryRatings:
    values = {name: 5 for name in CategoryRatings.model_fields}
    values.update(overrides)
    return CategoryRatings(**values)


def test_empty_entries_return_no_analysis() -> None:
    assert mood_analysis.analyze_mood_patterns([], "weekly") is None


def test_metrics_for_mixed_sequence() -> None:
    entries = [
        _entry(MoodType.TRISTE, 2, 0),
        _entry(MoodType.FELIZ, 4, 60),
        _entry(MoodType.FELIZ, 4, 120),
        _entry(MoodType.ANSIOSO, 1, 180),
    ]

    analysis = mood_analysis.analyze_mood_patterns(entries, "weekly")

    assert analysis is not None
    assert analysis.entry_count == 4
    assert analysis.metrics.emotional_variability == pytest.approx(1 / 3)
    assert analysis.metrics.mood_stability == pytest.approx(1 / 3)
    assert analysis.metrics.recovery_resilience == pytest.approx(1.0)
    assert analysis.metrics.positive_negative_ratio == pytest.approx(1.0)


def test_single_entry_uses_neutral_defaults() -> None:
    entries = [_entry(MoodType.CALMO, 3)]

    assert mood_analysis.calculate_emotional_variability(entries) == 0.0
    assert mood_analysis.calculate_mood_stability(entries) == 1.0
    assert mood_analysis.calculate_recovery_resilience(entries) == 1.0


def test_ratio_without_negatives_is_positive_count() -> None:
    entries = [_entry(MoodType.FELIZ, 3, i) for i in range(3)]
    assert mood_analysis.calculate_positive_negative_ratio(entries) == 3.0


def test_hopeful_mood_is_neutral() -> None:
    assert not mood_analysis.is_positive(MoodType.ESPERANCOSO)
    assert not mood_analysis.is_negative(MoodType.ESPERANCOSO)
    entries = [_entry(MoodType.ESPERANCOSO, 3, i) for i in range(2)]
    assert mood_analysis.calculate_positive_negative_ratio(entries) == 0.0


def test_high_variability_insight() -> None:
    entries = [
        _entry(MoodType.FELIZ, 1, 0),
        _entry(MoodType.TRISTE, 5, 10),
        _entry(MoodType.FELIZ, 1, 20),
        _entry(MoodType.TRISTE, 5, 30),
    ]

    analysis = mood_analysis.analyze_mood_patterns(entries, "daily")

    assert analysis is not None
    assert analysis.metrics.emotional_variability == pytest.approx(0.8)
    pattern = [i for i in analysis.insights if i.type == "pattern"]
    assert len(pattern) == 1
    assert pattern[0].confidence == 0.8
    assert not [i for i in analysis.insights if i.type == "warning"]


def test_low_resilience_warning() -> None:
    entries = [
        _entry(MoodType.TRISTE, 3, 0),
        _entry(MoodType.ANSIOSO, 3, 10),
        _entry(MoodType.TRISTE, 3, 20),
    ]

    analysis = mood_analysis.analyze_mood_patterns(entries, "weekly")

    assert analysis is not None
    assert analysis.metrics.recovery_resilience == 0.0
    warnings = [i for i in analysis.insights if i.type == "warning"]
    assert len(warnings) == 1
    assert warnings[0].confidence == 0.75


def test_activity_correlation_prefers_later_mood_on_tie() -> None:
    entries = [
        _entry(MoodType.FELIZ, 4, 0, ["caminhada", "jantar"]),
        _entry(MoodType.TRISTE, 2, 10, ["caminhada"]),
        _entry(MoodType.FELIZ, 4, 20, ["jantar"]),
    ]

    correlations = {c.activity: c for c in mood_analysis.correlate_activities(entries)}

    assert correlations["caminhada"].dominant_mood == MoodType.TRISTE
    assert correlations["caminhada"].occurrences == 2
    assert correlations["jantar"].dominant_mood == MoodType.FELIZ
    assert correlations["jantar"].mood_counts == {"feliz": 2}

    analysis = mood_analysis.analyze_mood_patterns(entries, "weekly")
    assert analysis is not None
    improvements = [i for i in analysis.insights if i.type == "improvement"]
    assert len(improvements) == 1
    assert "jantar" in improvements[0].description
    assert improvements[0].confidence == 0.7


def test_category_correlation_uses_signed_mood_score() -> None:
    entries = [_entry(MoodType.FELIZ, 1, 0), _entry(MoodType.FELIZ, 3, 10), _entry(MoodType.FELIZ, 5, 20)]
    ratings = [_ratings(comunicacao=2), _ratings(comunicacao=4), _ratings(comunicacao=6)]

    correlations = {c.category: c.correlation for c in mood_analysis.correlate_with_categories(entries, ratings)}

    assert len(correlations) == 13
    assert correlations["comunicacao"] == pytest.approx(1.0)
    # 값이 일정한 영역은 분모가 0
    assert correlations["gratidao"] == 0.0


def test_category_correlation_truncates_to_shorter_series() -> None:
    entries = [_entry(MoodType.FELIZ, 1, 0), _entry(MoodType.FELIZ, 5, 10), _entry(MoodType.TRISTE, 5, 20)]
    ratings = [_ratings(comunicacao=1), _ratings(comunicacao=9)]

    correlations = {c.category: c.correlation for c in mood_analysis.correlate_with_categories(entries, ratings)}

    assert correlations["comunicacao"] == pytest.approx(1.0)
    assert mood_analysis.correlate_with_categories(entries, []) == []


def test_transitions_and_time_patterns() -> None:
    night = datetime(2024, 5, 1, 21, 0, tzinfo=timezone.utc)
    early = datetime(2024, 5, 2, 3, 0, tzinfo=timezone.utc)
    entries = [
        MoodEntry(user_id="u", timestamp=night, mood=MoodState(primary=MoodType.CALMO, intensity=3)),
        MoodEntry(user_id="u", timestamp=early, mood=MoodState(primary=MoodType.ANSIOSO, intensity=4)),
    ]

    analysis = mood_analysis.analyze_mood_patterns(entries, "daily")

    assert analysis is not None
    assert analysis.patterns.time_patterns == {"noite": MoodType.CALMO, "madrugada": MoodType.ANSIOSO}
    assert len(analysis.patterns.mood_transitions) == 1
    transition = analysis.patterns.mood_transitions[0]
    assert (transition.from_mood, transition.to_mood, transition.count) == (MoodType.CALMO, MoodType.ANSIOSO, 1)
