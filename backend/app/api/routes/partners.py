from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...dependencies import get_mongo_db
from ...schemas import PartnerAcceptRequest, PartnerInviteRequest, UserPublic
from ...services import notifications as notification_service
from ...services import users as user_service

router = APIRouter()


@router.post("/invite", status_code=status.HTTP_201_CREATED)
async def invite_partner(
    payload: PartnerInviteRequest,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> dict[str, str]:
    if current_user.partner_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Você já possui um parceiro conectado.")
    notification_id = await notification_service.add_partner_invitation(
        db, current_user.id, current_user.email, payload.email
    )
    return {"notification_id": notification_id}


@router.post("/accept", response_model=UserPublic)
async def accept_invitation(
    payload: PartnerAcceptRequest,
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    notification = await notification_service.get_notification(db, payload.notification_id, current_user.id)
    inviter_id = notification.get("data", {}).get("inviter_id")
    if notification.get("type") != "partner_invitation" or not inviter_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Notificação não é um convite de parceiro.")
    if notification.get("read"):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Este convite já foi utilizado.")

    await user_service.link_partners(db, current_user.id, inviter_id)
    await notification_service.mark_notification_as_read(db, payload.notification_id, current_user.id)
    doc = await user_service.get_user_by_id(db, current_user.id)
    return user_service.document_to_user(doc)


@router.get("/me", response_model=UserPublic)
async def get_partner(
    current_user: UserPublic = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    if not current_user.partner_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nenhum parceiro conectado.")
    doc = await user_service.get_user_by_id(db, current_user.partner_id)
    if not doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parceiro não encontrado.")
    return user_service.document_to_user(doc)
