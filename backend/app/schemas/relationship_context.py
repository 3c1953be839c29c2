from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RelationshipContextData(BaseModel):
    """사용자가 직접 입력하는 관계 배경 정보. AI 분석 프롬프트에 그대로 들어감"""

    duration: str = Field(default="", max_length=100)
    status: str = Field(default="", max_length=100)
    type: str = Field(default="", max_length=100)
    goals: list[str] = Field(default_factory=list, max_length=20)
    challenges: list[str] = Field(default_factory=list, max_length=20)
    values: list[str] = Field(default_factory=list, max_length=20)
    current_dynamics: str = Field(default="", max_length=2000)
    strengths: str = Field(default="", max_length=2000)
    recurring_problems: str = Field(default="", max_length=2000)
    app_goals: str = Field(default="", max_length=2000)

    def prompt_context(self) -> dict[str, Any]:
        return self.model_dump(include=set(RelationshipContextData.model_fields))


class RelationshipContext(RelationshipContextData):
    id: str
    user_id: str
    partner_id: str | None = None
    created_at: datetime
    updated_at: datetime
