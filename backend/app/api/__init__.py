from fastapi import APIRouter

from .routes import (
    analyses,
    assessments,
    auth,
    gamification,
    health,
    llm,
    moods,
    notifications,
    partners,
    relationship,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(partners.router, prefix="/partners", tags=["partners"])
api_router.include_router(moods.router, prefix="/moods", tags=["moods"])
api_router.include_router(assessments.router, prefix="/assessments", tags=["assessments"])
api_router.include_router(relationship.router, prefix="/relationship", tags=["relationship"])
api_router.include_router(gamification.router, prefix="/gamification", tags=["gamification"])
api_router.include_router(analyses.router, prefix="/analyses", tags=["analyses"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(llm.router, prefix="/llm", tags=["llm"])
