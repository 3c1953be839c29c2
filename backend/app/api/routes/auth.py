from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from ...core.auth import get_current_user
from ...core.security import create_access_token
from ...dependencies import get_mongo_db
from ...schemas import LoginResponse, SignupResponse, UserCreate, UserLogin, UserPublic
from ...services import users as user_service

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(payload: UserCreate, db: AsyncIOMotorDatabase = Depends(get_mongo_db)) -> SignupResponse:
    user = await user_service.create_user(db, payload)
    return SignupResponse(user=user)


@router.post("/login", response_model=LoginResponse)
async def login(payload: UserLogin, db: AsyncIOMotorDatabase = Depends(get_mongo_db)) -> LoginResponse:
    user_doc = await user_service.authenticate_user(db, payload)
    user = user_service.document_to_user(user_doc)
    access_token = create_access_token(user.id, extra={"role": "user"})
    return LoginResponse(access_token=access_token, user=user)


@router.get("/me", response_model=UserPublic)
async def me(current_user: UserPublic = Depends(get_current_user)) -> UserPublic:
    return current_user
