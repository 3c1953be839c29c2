from __future__ import annotations

import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.analysis import AnalysisRecord, AnalysisType, CanonicalAnalysis

logger = logging.getLogger(__name__)

ANALYSIS_HISTORY_COL = "analysisHistory"


def document_to_record(doc: dict) -> AnalysisRecord:
    return AnalysisRecord(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        partner_id=doc.get("partner_id"),
        date=doc["date"],
        type=doc["type"],
        analysis=CanonicalAnalysis(**doc["analysis"]),
        created_at=doc["created_at"],
    )


async def save_analysis(
    db: AsyncIOMotorDatabase,
    user_id: str,
    analysis_type: AnalysisType,
    analysis: CanonicalAnalysis,
    partner_id: str | None = None,
) -> AnalysisRecord:
    now = datetime.now(timezone.utc)
    doc: dict = {
        "user_id": user_id,
        "type": analysis_type,
        "analysis": analysis.model_dump(mode="json"),
        "date": now.date().isoformat(),
        "created_at": now,
    }
    if partner_id:
        doc["partner_id"] = partner_id
    result = await db[ANALYSIS_HISTORY_COL].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("analysis saved user=%s type=%s source=%s", user_id, analysis_type, analysis.source)
    return document_to_record(doc)


async def get_analysis_for_date(
    db: AsyncIOMotorDatabase, user_id: str, date: str, analysis_type: AnalysisType
) -> AnalysisRecord | None:
    doc = await db[ANALYSIS_HISTORY_COL].find_one({"user_id": user_id, "date": date, "type": analysis_type})
    return document_to_record(doc) if doc else None


async def list_analysis_history(db: AsyncIOMotorDatabase, user_id: str, limit: int = 30) -> list[AnalysisRecord]:
    cursor = db[ANALYSIS_HISTORY_COL].find({"user_id": user_id}).sort("created_at", -1).limit(limit)
    return [document_to_record(doc) async for doc in cursor]
