from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorDatabase


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db["users"].create_index("email", unique=True)
    await db["moodEntries"].create_index([("user_id", 1), ("timestamp", -1)])
    await db["assessments"].create_index([("user_id", 1), ("date", -1)])
    await db["analysisHistory"].create_index([("user_id", 1), ("date", -1), ("type", 1)])
    await db["notifications"].create_index([("user_id", 1), ("read", 1), ("created_at", -1)])
    await db["relationshipContexts"].create_index("user_id", unique=True)
