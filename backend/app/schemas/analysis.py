from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from .moods import MoodState

Trend = Literal["improving", "stable", "declining"]
ImpactLevel = Literal["alto", "médio", "baixo"]
AnalysisType = Literal["individual", "collective"]


class OverallHealth(BaseModel):
    score: float = 0
    trend: Trend = "stable"


class CategoryAnalysis(BaseModel):
    score: float = 0
    partner_score: float | None = None
    trend: Trend = "stable"
    insights: list[str] = Field(default_factory=list)


class StrengthsAndChallenges(BaseModel):
    strengths: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)


class RelationshipDynamics(BaseModel):
    positive_patterns: list[str] = Field(default_factory=list)
    concerning_patterns: list[str] = Field(default_factory=list)
    growth_areas: list[str] = Field(default_factory=list)
    discrepancy_insights: str | None = None


class IntimacyAreas(BaseModel):
    emotional: float = 0
    physical: float = 0
    intellectual: float = 0
    shared: float = 0


class IntimacyBalance(BaseModel):
    score: float = 0
    areas: IntimacyAreas = Field(default_factory=IntimacyAreas)


class ConflictResolution(BaseModel):
    style: str = "collaborative"
    effectiveness: float = 0
    patterns: list[str] = Field(default_factory=list)


class EmotionalDynamics(BaseModel):
    emotional_security: float = 0
    intimacy_balance: IntimacyBalance = Field(default_factory=IntimacyBalance)
    conflict_resolution: ConflictResolution = Field(default_factory=ConflictResolution)


class MoodDiscrepancy(BaseModel):
    timestamp: datetime
    user_mood: MoodState
    partner_mood: MoodState
    impact: ImpactLevel


class RelationshipInsight(BaseModel):
    type: str
    description: str
    recommendation: str
    confidence: float | None = None


class RelationshipAnalysis(BaseModel):
    overall_health: OverallHealth = Field(default_factory=OverallHealth)
    categories: dict[str, CategoryAnalysis] = Field(default_factory=dict)
    strengths_and_challenges: StrengthsAndChallenges = Field(default_factory=StrengthsAndChallenges)
    communication_suggestions: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    relationship_dynamics: RelationshipDynamics = Field(default_factory=RelationshipDynamics)
    emotional_dynamics: EmotionalDynamics = Field(default_factory=EmotionalDynamics)
    emotional_sync: float = 0
    mood_discrepancies: list[MoodDiscrepancy] = Field(default_factory=list)
    insights: list[RelationshipInsight] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class HeuristicSource(BaseModel):
    kind: Literal["heuristic"] = "heuristic"
    analysis: RelationshipAnalysis


class LLMSource(BaseModel):
    kind: Literal["llm"] = "llm"
    content: dict[str, Any] | str


AnalysisSource = Annotated[Union[HeuristicSource, LLMSource], Field(discriminator="kind")]


class CanonicalAnalysis(RelationshipAnalysis):
    """렌더링/저장 전에 모든 분석 결과가 거치는 단일 형태"""

    source: Literal["heuristic", "llm"]
    text_report: str | None = None


class AnalysisRecord(BaseModel):
    id: str
    user_id: str
    partner_id: str | None = None
    date: str
    type: AnalysisType
    analysis: CanonicalAnalysis
    created_at: datetime
