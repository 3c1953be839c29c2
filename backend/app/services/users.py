from datetime import datetime, timezone

from bson import ObjectId
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..core.security import get_password_hash, verify_password
from ..schemas.user import UserCreate, UserLogin, UserPublic

USERS_COLLECTION = "users"


def to_object_id(value: str, detail: str = "Identificador inválido.") -> ObjectId:
    try:
        return ObjectId(value)
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from exc


async def find_user_by_email(db: AsyncIOMotorDatabase, email: str) -> dict | None:
    return await db[USERS_COLLECTION].find_one({"email": email})


async def get_user_by_id(db: AsyncIOMotorDatabase, user_id: str) -> dict | None:
    object_id = to_object_id(user_id, "Formato de ID de usuário inválido.")
    return await db[USERS_COLLECTION].find_one({"_id": object_id})


def document_to_user(doc: dict) -> UserPublic:
    partner_id = doc.get("partner_id")
    return UserPublic(
        id=str(doc["_id"]),
        email=doc["email"],
        name=doc.get("name", ""),
        partner_id=str(partner_id) if partner_id else None,
        created_at=doc.get("created_at", datetime.now(timezone.utc)),
    )


async def create_user(db: AsyncIOMotorDatabase, payload: UserCreate) -> UserPublic:
    existing = await find_user_by_email(db, payload.email)
    if existing:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="E-mail já cadastrado.")

    now = datetime.now(timezone.utc)
    user_doc = {
        "email": payload.email,
        "password_hash": get_password_hash(payload.password),
        "name": payload.name,
        "created_at": now,
        "updated_at": now,
    }
    result = await db[USERS_COLLECTION].insert_one(user_doc)
    user_doc["_id"] = result.inserted_id
    return document_to_user(user_doc)


async def authenticate_user(db: AsyncIOMotorDatabase, payload: UserLogin) -> dict:
    user_doc = await find_user_by_email(db, payload.email)
    if not user_doc or not verify_password(payload.password, user_doc.get("password_hash", "")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="E-mail ou senha incorretos.")
    return user_doc


async def link_partners(db: AsyncIOMotorDatabase, user_id: str, partner_id: str) -> None:
    """두 사용자를 서로의 파트너로 연결. 어느 한쪽이라도 이미 연결돼 있으면 409"""
    user_doc = await get_user_by_id(db, user_id)
    partner_doc = await get_user_by_id(db, partner_id)
    if not user_doc or not partner_doc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário que enviou o convite não encontrado.")
    if user_doc.get("partner_id"):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Você já possui um parceiro conectado.")
    if partner_doc.get("partner_id"):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Este usuário já está conectado a outro parceiro."
        )

    now = datetime.now(timezone.utc)
    user_obj_id = user_doc["_id"]
    partner_obj_id = partner_doc["_id"]
    await db[USERS_COLLECTION].update_one(
        {"_id": user_obj_id},
        {"$set": {"partner_id": partner_obj_id, "updated_at": now}},
    )
    await db[USERS_COLLECTION].update_one(
        {"_id": partner_obj_id},
        {"$set": {"partner_id": user_obj_id, "updated_at": now}},
    )
