from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone

from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.assessments import AssessmentCreate, CategoryRatings, DailyAssessment
from ..schemas.user import UserPublic

logger = logging.getLogger(__name__)

ASSESSMENTS_COL = "assessments"


def document_to_assessment(doc: dict) -> DailyAssessment:
    return DailyAssessment(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        partner_id=doc.get("partner_id"),
        date=doc["date"],
        ratings=CategoryRatings(**doc["ratings"]),
        comments=doc.get("comments"),
        gratitude=doc.get("gratitude"),
        created_at=doc.get("created_at"),
    )


def _day_bounds(now: datetime) -> tuple[datetime, datetime]:
    start = datetime.combine(now.astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


async def get_assessment_for_day(
    db: AsyncIOMotorDatabase, user_id: str, now: datetime | None = None
) -> DailyAssessment | None:
    start, end = _day_bounds(now or datetime.now(timezone.utc))
    doc = await db[ASSESSMENTS_COL].find_one({"user_id": user_id, "date": {"$gte": start, "$lt": end}})
    return document_to_assessment(doc) if doc else None


async def create_assessment(
    db: AsyncIOMotorDatabase, user: UserPublic, payload: AssessmentCreate
) -> DailyAssessment:
    """UTC 기준 하루 한 건만 허용"""
    now = datetime.now(timezone.utc)
    if await get_assessment_for_day(db, user.id, now):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Você já realizou a avaliação de hoje.")

    doc: dict = {
        "user_id": user.id,
        "date": now,
        "ratings": payload.ratings.model_dump(),
        "created_at": now,
    }
    if user.partner_id:
        doc["partner_id"] = user.partner_id
    if payload.comments:
        doc["comments"] = payload.comments
    if payload.gratitude:
        doc["gratitude"] = payload.gratitude

    result = await db[ASSESSMENTS_COL].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("assessment saved user=%s partner=%s", user.id, user.partner_id)
    return document_to_assessment(doc)


async def get_assessment_history(
    db: AsyncIOMotorDatabase, user_id: str, limit: int | None = None
) -> list[DailyAssessment]:
    """date 내림차순 (연속 기록 계산이 이 순서를 전제로 함)"""
    cursor = db[ASSESSMENTS_COL].find({"user_id": user_id}).sort("date", -1)
    if limit:
        cursor = cursor.limit(limit)
    return [document_to_assessment(doc) async for doc in cursor]
