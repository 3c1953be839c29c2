from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import NotificationOut, UserPublic
from ...services import notifications as notification_service

router = APIRouter()


@router.get("/unread", response_model=list[NotificationOut])
async def list_unread(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> list[NotificationOut]:
    return await notification_service.get_unread_notifications(db, current_user.id)


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: str,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> None:
    await notification_service.mark_notification_as_read(db, notification_id, current_user.id)
