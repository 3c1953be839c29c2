from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db.mongo import MongoConnectionManager
from ..schemas.notifications import NotificationOut, NotificationType
from .gamification import Achievement
from .users import find_user_by_email, to_object_id

logger = logging.getLogger(__name__)

NOTIFICATIONS_COL = "notifications"


def document_to_notification(doc: dict) -> NotificationOut:
    return NotificationOut(
        id=str(doc["_id"]),
        user_id=doc["user_id"],
        type=doc["type"],
        title=doc["title"],
        message=doc["message"],
        read=doc.get("read", False),
        created_at=doc["created_at"],
        data=doc.get("data", {}),
    )


async def add_notification(
    db: AsyncIOMotorDatabase,
    user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
    data: dict[str, str] | None = None,
) -> str:
    doc = {
        "user_id": user_id,
        "type": notification_type,
        "title": title,
        "message": message,
        "read": False,
        "created_at": datetime.now(timezone.utc),
        "data": data or {},
    }
    result = await db[NOTIFICATIONS_COL].insert_one(doc)
    return str(result.inserted_id)


async def get_notification(db: AsyncIOMotorDatabase, notification_id: str, user_id: str) -> dict:
    doc = await db[NOTIFICATIONS_COL].find_one(
        {"_id": to_object_id(notification_id, "ID de notificação inválido."), "user_id": user_id}
    )
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notificação não encontrada.")
    return doc


async def mark_notification_as_read(db: AsyncIOMotorDatabase, notification_id: str, user_id: str) -> None:
    doc = await get_notification(db, notification_id, user_id)
    await db[NOTIFICATIONS_COL].update_one({"_id": doc["_id"]}, {"$set": {"read": True}})


async def get_unread_notifications(db: AsyncIOMotorDatabase, user_id: str) -> list[NotificationOut]:
    cursor = db[NOTIFICATIONS_COL].find({"user_id": user_id, "read": False}).sort("created_at", -1)
    return [document_to_notification(doc) async for doc in cursor]


async def add_partner_invitation(
    db: AsyncIOMotorDatabase, inviter_id: str, inviter_email: str, target_email: str
) -> str:
    target = await find_user_by_email(db, target_email)
    if not target:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário não encontrado.")
    if str(target["_id"]) == inviter_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Você não pode convidar a si mesmo.")
    return await add_notification(
        db,
        str(target["_id"]),
        "partner_invitation",
        "Convite de Parceiro",
        f"{inviter_email} gostaria de se conectar com você como parceiro.",
        {"inviter_id": inviter_id, "inviter_email": inviter_email},
    )


async def notify_achievement(user_id: str, achievement: Achievement) -> None:
    """게이미피케이션 서비스의 알림 콜백"""
    db = MongoConnectionManager.get_database()
    await add_notification(
        db,
        user_id,
        "goal_achieved",
        "Conquista desbloqueada!",
        f"{achievement.title}! {achievement.description}",
        {"achievement_id": achievement.id},
    )
    logger.info("achievement unlocked user=%s achievement=%s", user_id, achievement.id)
