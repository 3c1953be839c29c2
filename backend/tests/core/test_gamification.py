from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from backend.app.schemas.assessments import CategoryRatings, DailyAssessment
from backend.app.schemas.gamification import UserStats
from backend.app.services.gamification import (
    GamificationService,
    InMemoryUnlockStore,
    RedisUnlockStore,
)

NOW = datetime(2024, 5, 10, 15, 0, tzinfo=timezone.utc)


def _assessment(days_ago: int, partner_id: str | None = None, **overrides: int) -> DailyAssessment:
    values = {name: 5 for name in CategoryRatings.model_fields}
    values.update(overrides)
    return DailyAssessment(
        user_id="u",
        partner_id=partner_id,
        date=NOW - timedelta(days=days_ago),
        ratings=CategoryRatings(**values),
    )


def test_streak_stops_at_first_gap() -> None:
    history = [_assessment(0), _assessment(1), _assessment(3)]
    assert GamificationService.calculate_streak(history, NOW.date()) == 2


def test_streak_is_zero_without_today() -> None:
    history = [_assessment(1), _assessment(2)]
    assert GamificationService.calculate_streak(history, NOW.date()) == 0


def test_weekly_completion_rate_counts_last_seven_days() -> None:
    history = [_assessment(0), _assessment(2), _assessment(5), _assessment(10)]
    rate = GamificationService.calculate_weekly_completion_rate(history, NOW)
    assert rate == pytest.approx(3 / 7 * 100)


def test_improving_categories_are_strictly_increasing() -> None:
    # 최신순: [오늘, 어제, 그제]
    history = [
        _assessment(0, comunicacao=7, conexao_emocional=6, gratidao=4),
        _assessment(1, comunicacao=5, conexao_emocional=5, gratidao=5),
        _assessment(2, comunicacao=3, conexao_emocional=5, gratidao=6),
    ]

    assert GamificationService.calculate_improving_categories(history) == ["comunicacao"]
    assert GamificationService.calculate_improving_categories(history[:2]) == []


def test_partner_sync_rate() -> None:
    history = [_assessment(0, "p"), _assessment(1, "p"), _assessment(2), _assessment(3)]
    assert GamificationService.calculate_partner_sync_rate(history) == 50.0
    assert GamificationService.calculate_partner_sync_rate([]) == 0.0


@pytest.mark.parametrize(("total", "level"), [(0, 1), (9, 1), (10, 2), (25, 3)])
def test_level_thresholds(total: int, level: int) -> None:
    assert GamificationService.get_level(total) == level


def test_next_level_progress() -> None:
    assert GamificationService.get_next_level_progress(25) == 50.0
    assert GamificationService.get_next_level_progress(10) == 0.0


def test_user_stats_combines_calculations() -> None:
    service = GamificationService(InMemoryUnlockStore())
    stats = service.get_user_stats([_assessment(0, "p"), _assessment(1)], now=NOW)

    assert stats.assessment_streak == 2
    assert stats.total_assessments == 2
    assert stats.partner_sync_rate == 50.0


def test_achievements_unlock_once_and_notify() -> None:
    store = InMemoryUnlockStore()
    notified: list[tuple[str, str]] = []

    async def notifier(user_id: str, achievement) -> None:
        notified.append((user_id, achievement.id))

    service = GamificationService(store, notifier=notifier)
    stats = UserStats(total_assessments=1)

    first = asyncio.run(service.check_achievements("u1", stats))
    second = asyncio.run(service.check_achievements("u1", stats))

    assert [a.id for a in first] == ["first-assessment"]
    assert second == []
    assert notified == [("u1", "first-assessment")]

    store.reset()
    again = asyncio.run(service.check_achievements("u1", stats))
    assert [a.id for a in again] == ["first-assessment"]


def test_unlocks_are_tracked_per_user() -> None:
    service = GamificationService(InMemoryUnlockStore())
    asyncio.run(service.check_achievements("u1", UserStats(total_assessments=1, partner_sync_rate=95)))

    mine = {a.id: a.is_unlocked for a in asyncio.run(service.get_achievements("u1"))}
    theirs = {a.id: a.is_unlocked for a in asyncio.run(service.get_achievements("u2"))}

    assert mine["first-assessment"] and mine["sync-master"]
    assert not mine["week-streak"]
    assert not any(theirs.values())


def test_notifier_failure_does_not_block_unlock() -> None:
    async def broken_notifier(_user_id: str, _achievement) -> None:
        raise RuntimeError("알림 실패")

    service = GamificationService(InMemoryUnlockStore(), notifier=broken_notifier)
    unlocked = asyncio.run(service.check_achievements("u1", UserStats(assessment_streak=7, total_assessments=7)))

    assert {a.id for a in unlocked} == {"first-assessment", "week-streak"}


def test_redis_unlock_store(dummy_redis) -> None:
    service = GamificationService(RedisUnlockStore(lambda: dummy_redis))
    asyncio.run(service.check_achievements("u1", UserStats(weekly_completion_rate=100)))

    assert dummy_redis.sets["achievements:unlocked:u1"] == {"perfect-week"}
