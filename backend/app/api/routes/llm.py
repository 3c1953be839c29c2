import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ...schemas import GenerateAnalysisRequest, GenerateAnalysisResponse
from ...services import llm

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/generate-analysis", response_model=GenerateAnalysisResponse)
async def generate_analysis(payload: GenerateAnalysisRequest):
    """
    외부 클라이언트용 범용 분석 엔드포인트.

    오류는 {"error": ..., "details": ...} 형태의 본문으로 반환합니다.
    """
    if not payload.systemPrompt.strip() or not payload.userPrompt.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing required parameters"},
        )

    try:
        result = await llm.generate_analysis(payload.systemPrompt, payload.userPrompt, payload.temperature)
    except llm.LLMInvalidJSONError as exc:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Invalid JSON response from model", "details": str(exc)},
        )
    except llm.LLMError as exc:
        logger.error("분석 생성 실패: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to generate analysis", "details": str(exc)},
        )
    return GenerateAnalysisResponse(result=result)
