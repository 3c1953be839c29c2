from .ai import GenerateAnalysisRequest, GenerateAnalysisResponse, LLMTaskEnqueued, LLMTaskStatusResponse
from .analysis import (
    AnalysisRecord,
    CanonicalAnalysis,
    HeuristicSource,
    LLMSource,
    MoodDiscrepancy,
    RelationshipAnalysis,
    RelationshipInsight,
)
from .assessments import AssessmentCreate, AssessmentStatistics, CategoryRatings, DailyAssessment, RadarPoint
from .auth import LoginResponse, SignupResponse
from .gamification import AchievementOut, GamificationSummary, LevelInfo, UserStats
from .insights import CategoryDiscrepancy, PsychologicalProfile, RatingDiscrepancy, RelationshipStage
from .moods import MoodAnalysis, MoodEntry, MoodEntryCreate, MoodState, MoodType
from .notifications import NotificationOut, PartnerAcceptRequest, PartnerInviteRequest
from .relationship_context import RelationshipContext, RelationshipContextData
from .user import UserCreate, UserLogin, UserPublic

__all__ = [
    "GenerateAnalysisRequest",
    "GenerateAnalysisResponse",
    "LLMTaskEnqueued",
    "LLMTaskStatusResponse",
    "AnalysisRecord",
    "CanonicalAnalysis",
    "HeuristicSource",
    "LLMSource",
    "MoodDiscrepancy",
    "RelationshipAnalysis",
    "RelationshipInsight",
    "AssessmentCreate",
    "AssessmentStatistics",
    "CategoryRatings",
    "DailyAssessment",
    "RadarPoint",
    "LoginResponse",
    "SignupResponse",
    "AchievementOut",
    "GamificationSummary",
    "LevelInfo",
    "UserStats",
    "CategoryDiscrepancy",
    "PsychologicalProfile",
    "RatingDiscrepancy",
    "RelationshipStage",
    "MoodAnalysis",
    "MoodEntry",
    "MoodEntryCreate",
    "MoodState",
    "MoodType",
    "NotificationOut",
    "PartnerAcceptRequest",
    "PartnerInviteRequest",
    "RelationshipContext",
    "RelationshipContextData",
    "UserCreate",
    "UserLogin",
    "UserPublic",
]
