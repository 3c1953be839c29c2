import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import AssessmentCreate, AssessmentStatistics, DailyAssessment, UserPublic
from ...services import assessments as assessment_service
from ...services.assessment_aggregation import process_assessment_data

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=DailyAssessment, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    payload: AssessmentCreate,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> DailyAssessment:
    return await assessment_service.create_assessment(db, current_user, payload)


@router.get("/history", response_model=list[DailyAssessment])
async def list_history(
    limit: int = Query(default=30, ge=1, le=365),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> list[DailyAssessment]:
    return await assessment_service.get_assessment_history(db, current_user.id, limit)


@router.get("/today", response_model=DailyAssessment | None)
async def get_today(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> DailyAssessment | None:
    return await assessment_service.get_assessment_for_day(db, current_user.id)


@router.get("/statistics", response_model=AssessmentStatistics)
async def get_statistics(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> AssessmentStatistics:
    """사용자와 상대방의 기록을 날짜별로 병합한 차트 데이터"""
    try:
        user_history = await assessment_service.get_assessment_history(db, current_user.id)
        partner_history = (
            await assessment_service.get_assessment_history(db, current_user.partner_id)
            if current_user.partner_id
            else []
        )
    except PyMongoError as exc:
        logger.error("평가 통계 조회 실패 (user=%s): %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Falha ao carregar as avaliações.",
        ) from exc
    return process_assessment_data(user_history, partner_history)
