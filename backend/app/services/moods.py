from __future__ import annotations

import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.moods import MoodContext, MoodEntry, MoodEntryCreate, MoodState

logger = logging.getLogger(__name__)

MOOD_ENTRIES_COL = "moodEntries"


def document_to_entry(doc: dict) -> MoodEntry:
    return MoodEntry(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        timestamp=doc["timestamp"],
        mood=MoodState(**doc["mood"]),
        context=MoodContext(**doc["context"]) if doc.get("context") else None,
        notes=doc.get("notes"),
        created_at=doc.get("created_at"),
    )


def _build_document(user_id: str, payload: MoodEntryCreate, now: datetime) -> dict:
    mood: dict = {"primary": payload.primary.value, "intensity": payload.intensity}
    if payload.secondary:
        mood["secondary"] = [m.value for m in payload.secondary]

    context: dict = {}
    if payload.activities:
        context["activities"] = payload.activities
    if payload.triggers:
        context["triggers"] = payload.triggers
    if payload.location:
        context["location"] = payload.location
    if payload.social_context:
        context["social_context"] = payload.social_context

    doc: dict = {"user_id": user_id, "timestamp": now, "mood": mood, "created_at": now}
    if context:
        doc["context"] = context
    if payload.notes:
        doc["notes"] = payload.notes
    return doc


async def save_mood_entry(db: AsyncIOMotorDatabase, user_id: str, payload: MoodEntryCreate) -> MoodEntry:
    """기분 기록은 생성 후 수정하지 않습니다."""
    doc = _build_document(user_id, payload, datetime.now(timezone.utc))
    result = await db[MOOD_ENTRIES_COL].insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info("mood entry saved user=%s mood=%s", user_id, payload.primary.value)
    return document_to_entry(doc)


async def get_user_mood_entries(
    db: AsyncIOMotorDatabase,
    user_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[MoodEntry]:
    """timestamp 내림차순"""
    query: dict = {"user_id": user_id}
    if start or end:
        window: dict = {}
        if start:
            window["$gte"] = start
        if end:
            window["$lte"] = end
        query["timestamp"] = window

    cursor = db[MOOD_ENTRIES_COL].find(query).sort("timestamp", -1)
    return [document_to_entry(doc) async for doc in cursor]
