from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..schemas.relationship_context import RelationshipContext, RelationshipContextData

logger = logging.getLogger(__name__)

RELATIONSHIP_CONTEXTS_COL = "relationshipContexts"


def document_to_context(doc: dict) -> RelationshipContext:
    fields = {name: doc[name] for name in RelationshipContextData.model_fields if name in doc}
    return RelationshipContext(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        partner_id=doc.get("partner_id"),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
        **fields,
    )


async def get_relationship_context(db: AsyncIOMotorDatabase, user_id: str) -> RelationshipContext | None:
    doc = await db[RELATIONSHIP_CONTEXTS_COL].find_one({"user_id": user_id})
    return document_to_context(doc) if doc else None


async def save_relationship_context(
    db: AsyncIOMotorDatabase,
    user_id: str,
    partner_id: str | None,
    data: RelationshipContextData,
) -> RelationshipContext:
    """사용자당 하나. 이미 있으면 생성 시각까지 새로 덮어씁니다."""
    now = datetime.now(timezone.utc)
    fields = {**data.model_dump(), "user_id": user_id, "partner_id": partner_id, "created_at": now, "updated_at": now}

    existing = await db[RELATIONSHIP_CONTEXTS_COL].find_one({"user_id": user_id})
    if existing:
        await db[RELATIONSHIP_CONTEXTS_COL].update_one({"_id": existing["_id"]}, {"$set": fields})
        fields["_id"] = existing["_id"]
    else:
        result = await db[RELATIONSHIP_CONTEXTS_COL].insert_one(fields)
        fields["_id"] = result.inserted_id
    logger.info("relationship context saved user=%s", user_id)
    return document_to_context(fields)


async def update_relationship_context(
    db: AsyncIOMotorDatabase,
    user_id: str,
    partner_id: str | None,
    data: RelationshipContextData,
) -> RelationshipContext:
    existing = await db[RELATIONSHIP_CONTEXTS_COL].find_one({"user_id": user_id})
    if not existing:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contexto do relacionamento não encontrado.")

    fields = {**data.model_dump(), "partner_id": partner_id, "updated_at": datetime.now(timezone.utc)}
    await db[RELATIONSHIP_CONTEXTS_COL].update_one({"_id": existing["_id"]}, {"$set": fields})
    return document_to_context({**existing, **fields})


async def resolve_prompt_context(
    db: AsyncIOMotorDatabase, user_id: str, partner_id: str | None = None
) -> dict | None:
    """저장된 본인 컨텍스트, 없으면 파트너 것을 프롬프트용 dict로"""
    for owner in (user_id, partner_id):
        if not owner:
            continue
        stored = await get_relationship_context(db, owner)
        if stored:
            return stored.prompt_context()
    return None
