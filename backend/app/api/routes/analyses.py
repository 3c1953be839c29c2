import logging
from datetime import date as date_type
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import AnalysisRecord, LLMSource, LLMTaskEnqueued, LLMTaskStatusResponse, UserPublic
from ...schemas.analysis import AnalysisType
from ...services import assessments as assessment_service
from ...services import llm
from ...services.analysis_history import get_analysis_for_date, list_analysis_history, save_analysis
from ...services.analysis_normalizer import normalize_analysis
from ...services.llm_tasks import LLMTaskType, enqueue_llm_task, get_task_status
from ...services.relationship_context import resolve_prompt_context

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/individual", response_model=AnalysisRecord, status_code=status.HTTP_201_CREATED)
async def create_individual_analysis(
    context: dict[str, Any] | None = Body(default=None, embed=True),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> AnalysisRecord:
    """오늘의 평가로 개인 인사이트를 생성합니다. 같은 날 이미 있으면 기존 기록을 반환합니다."""
    assessment = await assessment_service.get_assessment_for_day(db, current_user.id)
    if not assessment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faça a avaliação de hoje primeiro.")

    existing = await get_analysis_for_date(db, current_user.id, datetime.now(timezone.utc).date().isoformat(), "individual")
    if existing:
        return existing

    if context is None:
        context = await resolve_prompt_context(db, current_user.id, current_user.partner_id)

    try:
        insight = await llm.generate_daily_insight(assessment, context)
    except llm.LLMError as exc:
        logger.warning("개인 인사이트 생성 실패 (user=%s): %s", current_user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Não foi possível gerar o insight no momento.",
        ) from exc

    return await save_analysis(db, current_user.id, "individual", normalize_analysis(LLMSource(content=insight)))


@router.post("/collective", response_model=LLMTaskEnqueued, status_code=status.HTTP_202_ACCEPTED)
async def create_collective_analysis(
    context: dict[str, Any] | None = Body(default=None, embed=True),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> LLMTaskEnqueued:
    if not current_user.partner_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Conecte um parceiro para ver esta análise.")

    user_assessment = await assessment_service.get_assessment_for_day(db, current_user.id)
    partner_assessment = await assessment_service.get_assessment_for_day(db, current_user.partner_id)
    if not user_assessment or not partner_assessment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vocês dois precisam fazer a avaliação de hoje.",
        )

    if context is None:
        context = await resolve_prompt_context(db, current_user.id, current_user.partner_id)

    task_id = await enqueue_llm_task(
        LLMTaskType.RELATIONSHIP_ANALYSIS,
        {
            "user_id": current_user.id,
            "partner_id": current_user.partner_id,
            "user_assessment": user_assessment.model_dump(mode="json"),
            "partner_assessment": partner_assessment.model_dump(mode="json"),
            "context": context,
        },
    )
    return LLMTaskEnqueued(task_id=task_id)


@router.get("/tasks/{task_id}", response_model=LLMTaskStatusResponse)
async def get_analysis_task(task_id: str, current_user: UserPublic = Depends(get_current_user)) -> dict:
    return await get_task_status(task_id, current_user.id)


@router.get("/history", response_model=list[AnalysisRecord])
async def get_history(
    limit: int = Query(default=30, ge=1, le=100),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> list[AnalysisRecord]:
    return await list_analysis_history(db, current_user.id, limit)


@router.get("/by-date", response_model=AnalysisRecord)
async def get_by_date(
    date: date_type = Query(...),
    analysis_type: AnalysisType = Query(default="individual", alias="type"),
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> AnalysisRecord:
    record = await get_analysis_for_date(db, current_user.id, date.isoformat(), analysis_type)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nenhuma análise encontrada para esta data.")
    return record
