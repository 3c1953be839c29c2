from typing import Any

from pydantic import BaseModel, Field


class LLMTaskStatusResponse(BaseModel):
    task_id: str
    status: str
    type: str | None = None
    result: Any | None = None
    error: str | None = None
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None


class LLMTaskEnqueued(BaseModel):
    task_id: str
    status: str = "pending"


class GenerateAnalysisRequest(BaseModel):
    """외부 클라이언트와 맞춘 camelCase 요청 형식"""

    systemPrompt: str = ""
    userPrompt: str = ""
    temperature: float | None = Field(default=None, ge=0, le=2)


class GenerateAnalysisResponse(BaseModel):
    result: str
