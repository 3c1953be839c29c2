import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from ...core.auth import get_current_user
from ...core.config import settings
from ...dependencies import get_mongo_db
from ...schemas import HeuristicSource, RelationshipAnalysis, UserPublic
from ...schemas.insights import PsychologicalProfile, RatingDiscrepancy
from ...schemas.relationship_context import RelationshipContext, RelationshipContextData
from ...services import assessments as assessment_service
from ...services import moods as mood_service
from ...services import relationship_context as context_service
from ...services.analysis_history import save_analysis
from ...services.analysis_normalizer import normalize_analysis
from ...services.emotion_correlation import analyze_relationship_emotions
from ...services.psychological_analysis import build_psychological_profile
from ...services.rating_discrepancy import analyze_rating_discrepancies

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_partner(user: UserPublic) -> str:
    if not user.partner_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Conecte um parceiro para ver esta análise.")
    return user.partner_id


async def _couple_assessments(db: AsyncIOMotorDatabase, user_id: str, partner_id: str, start: datetime | None = None):
    try:
        user_history = await assessment_service.get_assessment_history(db, user_id)
        partner_history = await assessment_service.get_assessment_history(db, partner_id)
    except PyMongoError as exc:
        logger.error("커플 평가 이력 조회 실패 (user=%s): %s", user_id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Falha ao carregar as avaliações.",
        ) from exc
    if start is not None:
        user_history = [a for a in user_history if a.date >= start]
        partner_history = [a for a in partner_history if a.date >= start]
    return user_history, partner_history


@router.get("/emotions", response_model=RelationshipAnalysis)
async def get_emotion_correlation(
    days: int = Query(default=30, ge=1, le=365),
    save: bool = Query(default=False),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> RelationshipAnalysis:
    """기분 기록 상관 분석. 두 사람 모두 평가가 있으면 정서 역학도 채웁니다."""
    partner_id = _require_partner(current_user)

    start = datetime.now(timezone.utc) - timedelta(days=days)
    try:
        user_entries = await mood_service.get_user_mood_entries(db, current_user.id, start=start)
        partner_entries = await mood_service.get_user_mood_entries(db, partner_id, start=start)
    except PyMongoError as exc:
        logger.error("감정 상관 분석 데이터 조회 실패 (user=%s): %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Falha ao carregar os dados de humor.",
        ) from exc

    user_entries.sort(key=lambda e: e.timestamp)
    partner_entries.sort(key=lambda e: e.timestamp)
    analysis = analyze_relationship_emotions(
        user_entries,
        partner_entries,
        timedelta(hours=settings.pairing_window_hours),
    )

    user_history, partner_history = await _couple_assessments(db, current_user.id, partner_id, start)
    profile = build_psychological_profile(user_history, partner_history)
    if profile:
        analysis.emotional_dynamics = profile.emotional_dynamics

    if save:
        await save_analysis(
            db,
            current_user.id,
            "collective",
            normalize_analysis(HeuristicSource(analysis=analysis)),
            partner_id=partner_id,
        )
    return analysis


@router.get("/psychological", response_model=PsychologicalProfile)
async def get_psychological_profile(
    days: int = Query(default=30, ge=1, le=365),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> PsychologicalProfile:
    partner_id = _require_partner(current_user)
    start = datetime.now(timezone.utc) - timedelta(days=days)
    user_history, partner_history = await _couple_assessments(db, current_user.id, partner_id, start)
    profile = build_psychological_profile(user_history, partner_history)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vocês dois precisam ter avaliações no período.",
        )
    return profile


@router.get("/discrepancies", response_model=list[RatingDiscrepancy])
async def get_rating_discrepancies(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> list[RatingDiscrepancy]:
    """각자의 가장 최근 평가를 영역별로 비교합니다. 한쪽이라도 없으면 빈 목록"""
    partner_id = _require_partner(current_user)
    try:
        user_latest = await assessment_service.get_assessment_history(db, current_user.id, limit=1)
        partner_latest = await assessment_service.get_assessment_history(db, partner_id, limit=1)
    except PyMongoError as exc:
        logger.error("인식 차이 분석 데이터 조회 실패 (user=%s): %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Falha ao carregar as avaliações.",
        ) from exc
    if not user_latest or not partner_latest:
        return []
    return analyze_rating_discrepancies(user_latest[0].ratings, partner_latest[0].ratings)


@router.get("/context", response_model=RelationshipContext | None)
async def get_context(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> RelationshipContext | None:
    return await context_service.get_relationship_context(db, current_user.id)


@router.post("/context", response_model=RelationshipContext, status_code=status.HTTP_201_CREATED)
async def save_context(
    payload: RelationshipContextData,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> RelationshipContext:
    return await context_service.save_relationship_context(db, current_user.id, current_user.partner_id, payload)


@router.put("/context", response_model=RelationshipContext)
async def update_context(
    payload: RelationshipContextData,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> RelationshipContext:
    return await context_service.update_relationship_context(db, current_user.id, current_user.partner_id, payload)
