from typing import Literal

from pydantic import BaseModel, Field

from .analysis import EmotionalDynamics

Significance = Literal["high", "medium", "low"]


class RatingDiscrepancy(BaseModel):
    category: str
    label: str
    user_rating: int
    partner_rating: int
    difference: int
    significance: Significance
    recommendation: str


class CategoryDiscrepancy(BaseModel):
    """기간 평균 기준 영역별 인식 차이"""

    category: str
    difference: float
    significance: Significance


class RelationshipStage(BaseModel):
    current: str
    challenges: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    next_stage: str


class PsychologicalProfile(BaseModel):
    scale_averages: dict[str, float] = Field(default_factory=dict)
    emotional_dynamics: EmotionalDynamics = Field(default_factory=EmotionalDynamics)
    relationship_stage: RelationshipStage
    growth_areas: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    discrepancies: list[CategoryDiscrepancy] = Field(default_factory=list)
