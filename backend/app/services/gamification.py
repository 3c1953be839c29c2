from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Protocol

from redis.asyncio import Redis

from ..schemas.assessments import DailyAssessment
from ..schemas.gamification import AchievementOut, UserStats
from .assessment_aggregation import day_key

logger = logging.getLogger(__name__)

ASSESSMENTS_PER_LEVEL = 10
IMPROVEMENT_WINDOW = 3


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    icon: str
    condition: Callable[[UserStats], bool]
    reward: str | None = None

    def to_out(self, is_unlocked: bool) -> AchievementOut:
        return AchievementOut(
            id=self.id,
            title=self.title,
            description=self.description,
            icon=self.icon,
            reward=self.reward,
            is_unlocked=is_unlocked,
        )


ACHIEVEMENTS: tuple[Achievement, ...] = (
    Achievement(
        id="first-assessment",
        title="Primeiro Passo",
        description="Complete sua primeira avaliação diária",
        icon="🌟",
        condition=lambda stats: stats.total_assessments >= 1,
    ),
    Achievement(
        id="week-streak",
        title="Guerreiro da Semana",
        description="Complete avaliações por 7 dias consecutivos",
        icon="🔥",
        condition=lambda stats: stats.assessment_streak >= 7,
    ),
    Achievement(
        id="month-streak",
        title="Mestre da Dedicação",
        description="Complete avaliações por 30 dias consecutivos",
        icon="👑",
        condition=lambda stats: stats.assessment_streak >= 30,
    ),
    Achievement(
        id="perfect-week",
        title="Harmonia Perfeita",
        description="Alcance 100% de conclusão em uma semana",
        icon="🎯",
        condition=lambda stats: stats.weekly_completion_rate == 100,
    ),
    Achievement(
        id="improvement-champion",
        title="Campeão do Crescimento",
        description="Mostre melhora em 3 ou mais categorias",
        icon="📈",
        condition=lambda stats: len(stats.improving_categories) >= 3,
    ),
    Achievement(
        id="sync-master",
        title="Mestre da Sincronia",
        description="Alcance 90% de sincronia com o parceiro",
        icon="🤝",
        condition=lambda stats: stats.partner_sync_rate >= 90,
    ),
)


class UnlockStore(Protocol):
    async def unlocked(self, user_id: str) -> set[str]: ...

    async def unlock(self, user_id: str, achievement_id: str) -> None: ...


class InMemoryUnlockStore:
    """프로세스 메모리에만 보관 (재시작 시 초기화)"""

    def __init__(self) -> None:
        self._unlocked: dict[str, set[str]] = {}

    async def unlocked(self, user_id: str) -> set[str]:
        return set(self._unlocked.get(user_id, set()))

    async def unlock(self, user_id: str, achievement_id: str) -> None:
        self._unlocked.setdefault(user_id, set()).add(achievement_id)

    def reset(self) -> None:
        self._unlocked.clear()


class RedisUnlockStore:
    KEY_PREFIX = "achievements:unlocked:"

    def __init__(self, client_factory: Callable[[], Redis]) -> None:
        self._client_factory = client_factory

    async def unlocked(self, user_id: str) -> set[str]:
        return set(await self._client_factory().smembers(f"{self.KEY_PREFIX}{user_id}"))

    async def unlock(self, user_id: str, achievement_id: str) -> None:
        await self._client_factory().sadd(f"{self.KEY_PREFIX}{user_id}", achievement_id)


Notifier = Callable[[str, Achievement], Awaitable[None]]


class GamificationService:
    def __init__(
        self,
        store: UnlockStore,
        notifier: Notifier | None = None,
        achievements: Sequence[Achievement] = ACHIEVEMENTS,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.achievements = tuple(achievements)

    async def check_achievements(self, user_id: str, stats: UserStats) -> list[Achievement]:
        """새로 조건을 만족한 업적을 잠금 해제하고 알림을 보냅니다."""
        already = await self.store.unlocked(user_id)
        new_achievements: list[Achievement] = []
        for achievement in self.achievements:
            if achievement.id in already or not achievement.condition(stats):
                continue
            await self.store.unlock(user_id, achievement.id)
            new_achievements.append(achievement)
            await self._notify(user_id, achievement)
        return new_achievements

    async def _notify(self, user_id: str, achievement: Achievement) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier(user_id, achievement)
        except Exception as exc:
            logger.warning("업적 알림 전송 실패 (user=%s, achievement=%s): %s", user_id, achievement.id, exc)

    async def get_achievements(self, user_id: str) -> list[AchievementOut]:
        unlocked = await self.store.unlocked(user_id)
        return [a.to_out(a.id in unlocked) for a in self.achievements]

    def get_user_stats(
        self,
        assessments: Sequence[DailyAssessment],
        *,
        now: datetime | None = None,
    ) -> UserStats:
        """assessments는 날짜 내림차순이어야 합니다 (연속 기록 계산 전제)."""
        now = now or datetime.now(timezone.utc)
        return UserStats(
            assessment_streak=self.calculate_streak(assessments, now.astimezone(timezone.utc).date()),
            total_assessments=len(assessments),
            weekly_completion_rate=self.calculate_weekly_completion_rate(assessments, now),
            improving_categories=self.calculate_improving_categories(assessments),
            partner_sync_rate=self.calculate_partner_sync_rate(assessments),
        )

    @staticmethod
    def calculate_streak(assessments: Sequence[DailyAssessment], today: date) -> int:
        streak = 0
        for i, assessment in enumerate(assessments):
            expected = (today - timedelta(days=i)).isoformat()
            if day_key(assessment.date) != expected:
                break
            streak += 1
        return streak

    @staticmethod
    def calculate_weekly_completion_rate(assessments: Sequence[DailyAssessment], now: datetime) -> float:
        week_ago = now - timedelta(days=7)
        last_week = [a for a in assessments if _as_utc(a.date) >= week_ago]
        return len(last_week) / 7 * 100

    @staticmethod
    def calculate_improving_categories(assessments: Sequence[DailyAssessment]) -> list[str]:
        """최근 3건을 시간순으로 놓고 매번 엄격히 오른 영역"""
        if len(assessments) < IMPROVEMENT_WINDOW:
            return []
        window = [a.ratings.model_dump() for a in reversed(assessments[:IMPROVEMENT_WINDOW])]
        improving: list[str] = []
        for category in window[0]:
            oldest, middle, newest = (ratings[category] for ratings in window)
            if oldest < middle < newest:
                improving.append(category)
        return improving

    @staticmethod
    def calculate_partner_sync_rate(assessments: Sequence[DailyAssessment]) -> float:
        if not assessments:
            return 0.0
        synced = sum(1 for a in assessments if a.partner_id)
        return synced / len(assessments) * 100

    @staticmethod
    def get_level(total_assessments: int) -> int:
        return total_assessments // ASSESSMENTS_PER_LEVEL + 1

    @classmethod
    def get_next_level_progress(cls, total_assessments: int) -> float:
        current_floor = (cls.get_level(total_assessments) - 1) * ASSESSMENTS_PER_LEVEL
        return (total_assessments - current_floor) / ASSESSMENTS_PER_LEVEL * 100


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
