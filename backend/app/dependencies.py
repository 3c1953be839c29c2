from collections.abc import AsyncGenerator

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from .db.mongo import MongoConnectionManager
from .services.gamification import GamificationService


async def get_mongo_db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    db = MongoConnectionManager.get_database()
    yield db


def get_gamification_service(request: Request) -> GamificationService:
    """lifespan에서 한 번 생성된 게이미피케이션 서비스를 반환"""
    return request.app.state.gamification
