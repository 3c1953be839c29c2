from fastapi import APIRouter

from ...core.config import settings

router = APIRouter()


@router.get("/health", summary="Verificação de saúde da aplicação")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok", "service": settings.project_name}
