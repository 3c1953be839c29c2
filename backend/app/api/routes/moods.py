import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import MoodAnalysis, MoodEntry, MoodEntryCreate, UserPublic
from ...schemas.moods import Timeframe
from ...services import assessments as assessment_service
from ...services import moods as mood_service
from ...services.mood_analysis import analyze_mood_patterns

logger = logging.getLogger(__name__)

router = APIRouter()

TIMEFRAME_DAYS: dict[str, int] = {"daily": 1, "weekly": 7, "monthly": 30}


@router.post("", response_model=MoodEntry, status_code=status.HTTP_201_CREATED)
async def create_mood_entry(
    payload: MoodEntryCreate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> MoodEntry:
    return await mood_service.save_mood_entry(db, current_user.id, payload)


@router.get("", response_model=list[MoodEntry])
async def list_mood_entries(
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> list[MoodEntry]:
    return await mood_service.get_user_mood_entries(db, current_user.id, start, end)


@router.get("/analysis", response_model=MoodAnalysis | None)
async def get_mood_analysis(
    timeframe: Timeframe = Query(default="weekly"),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> MoodAnalysis | None:
    """기간 내 기록이 없으면 null을 반환합니다."""
    start = datetime.now(timezone.utc) - timedelta(days=TIMEFRAME_DAYS[timeframe])
    try:
        entries = await mood_service.get_user_mood_entries(db, current_user.id, start=start)
        history = await assessment_service.get_assessment_history(db, current_user.id)
    except PyMongoError as exc:
        logger.error("기분 분석 데이터 조회 실패 (user=%s): %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Falha ao carregar os dados de humor.",
        ) from exc

    entries.sort(key=lambda e: e.timestamp)
    ratings = [a.ratings for a in reversed(history) if a.date >= start]
    return analyze_mood_patterns(entries, timeframe, ratings)
