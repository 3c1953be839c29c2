from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_gamification_service, get_mongo_db
from ...schemas import AchievementOut, GamificationSummary, LevelInfo, UserPublic
from ...services import assessments as assessment_service
from ...services.gamification import GamificationService

router = APIRouter()


def _level_info(service: GamificationService, total: int) -> LevelInfo:
    return LevelInfo(
        level=service.get_level(total),
        next_level_progress=service.get_next_level_progress(total),
        total_assessments=total,
    )


@router.get("/stats", response_model=GamificationSummary)
async def get_stats(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
    service: GamificationService = Depends(get_gamification_service),
) -> GamificationSummary:
    """통계를 계산하고 새로 달성한 업적을 함께 반환합니다."""
    history = await assessment_service.get_assessment_history(db, current_user.id)
    stats = service.get_user_stats(history)
    unlocked = await service.check_achievements(current_user.id, stats)
    return GamificationSummary(
        stats=stats,
        level=_level_info(service, stats.total_assessments),
        new_achievements=[a.to_out(True) for a in unlocked],
    )


@router.get("/achievements", response_model=list[AchievementOut])
async def list_achievements(
    current_user: UserPublic = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
) -> list[AchievementOut]:
    return await service.get_achievements(current_user.id)


@router.get("/level", response_model=LevelInfo)
async def get_level(
    total: int = Query(default=0, ge=0),
    service: GamificationService = Depends(get_gamification_service),
) -> LevelInfo:
    return _level_info(service, total)
