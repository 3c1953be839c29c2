from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class MoodType(str, Enum):
    FELIZ = "feliz"
    ANIMADO = "animado"
    GRATO = "grato"
    CALMO = "calmo"
    SATISFEITO = "satisfeito"
    AMADO = "amado"
    ANSIOSO = "ansioso"
    ESTRESSADO = "estressado"
    TRISTE = "triste"
    IRRITADO = "irritado"
    FRUSTRADO = "frustrado"
    EXAUSTO = "exausto"
    CONFUSO = "confuso"
    SOLITARIO = "solitário"
    ESPERANCOSO = "esperançoso"


Timeframe = Literal["daily", "weekly", "monthly"]


class MoodState(BaseModel):
    primary: MoodType
    intensity: int
    secondary: list[MoodType] | None = None


class MoodContext(BaseModel):
    activities: list[str] | None = None
    triggers: list[str] | None = None
    location: str | None = None
    social_context: list[str] | None = None


class MoodEntryCreate(BaseModel):
    primary: MoodType
    intensity: int = Field(ge=1, le=5)
    secondary: list[MoodType] = Field(default_factory=list)
    activities: list[str] = Field(default_factory=list)
    triggers: list[str] = Field(default_factory=list)
    location: str | None = None
    social_context: list[str] = Field(default_factory=list)
    notes: str | None = None


class MoodEntry(BaseModel):
    id: str | None = None
    user_id: str
    timestamp: datetime
    mood: MoodState
    context: MoodContext | None = None
    notes: str | None = None
    created_at: datetime | None = None


class MoodInsight(BaseModel):
    type: Literal["pattern", "improvement", "warning"]
    description: str
    confidence: float
    recommendation: str


class ActivityCorrelation(BaseModel):
    activity: str
    dominant_mood: MoodType
    occurrences: int
    mood_counts: dict[str, int]


class CategoryCorrelation(BaseModel):
    category: str
    correlation: float


class MoodFrequency(BaseModel):
    mood: MoodType
    count: int


class MoodTransition(BaseModel):
    from_mood: MoodType
    to_mood: MoodType
    count: int


class MoodPatterns(BaseModel):
    dominant_moods: list[MoodFrequency] = Field(default_factory=list)
    mood_transitions: list[MoodTransition] = Field(default_factory=list)
    time_patterns: dict[str, MoodType] = Field(default_factory=dict)


class MoodCorrelations(BaseModel):
    activities: list[ActivityCorrelation] = Field(default_factory=list)
    categories: list[CategoryCorrelation] = Field(default_factory=list)


class MoodMetrics(BaseModel):
    emotional_variability: float = 0.0
    positive_negative_ratio: float = 0.0
    recovery_resilience: float = 1.0
    mood_stability: float = 1.0


class MoodAnalysis(BaseModel):
    timeframe: Timeframe
    entry_count: int
    patterns: MoodPatterns
    correlations: MoodCorrelations
    insights: list[MoodInsight]
    metrics: MoodMetrics
