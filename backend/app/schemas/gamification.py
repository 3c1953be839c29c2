from pydantic import BaseModel, Field


class UserStats(BaseModel):
    assessment_streak: int = 0
    total_assessments: int = 0
    weekly_completion_rate: float = 0.0
    improving_categories: list[str] = Field(default_factory=list)
    partner_sync_rate: float = 0.0


class AchievementOut(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    reward: str | None = None
    is_unlocked: bool = False


class LevelInfo(BaseModel):
    level: int
    next_level_progress: float
    total_assessments: int


class GamificationSummary(BaseModel):
    stats: UserStats
    level: LevelInfo
    new_achievements: list[AchievementOut] = Field(default_factory=list)
