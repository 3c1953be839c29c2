from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..dependencies import get_mongo_db
from ..schemas.user import UserPublic
from ..services.users import document_to_user, get_user_by_id
from .security import TokenError, decode_token

http_bearer = HTTPBearer(auto_error=False)


async def get_current_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Autenticação necessária.")
    return decode_token(credentials.credentials)


async def get_current_user(
    payload: dict = Depends(get_current_token),
    db: AsyncIOMotorDatabase = Depends(get_mongo_db),
) -> UserPublic:
    user_id = payload.get("sub")
    if not user_id:
        raise TokenError(detail="Token sem identificação de usuário.")

    doc = await get_user_by_id(db, user_id)
    if not doc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuário não encontrado.")

    return document_to_user(doc)
