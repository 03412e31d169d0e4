"""
Schemas package. Import from submodules or from this package.

Example:
    from learnpath.schemas import Pathway, Goal
    from learnpath.schemas.pathway_schemas import CognitiveLoad
"""

from learnpath.schemas.auth_schemas import (
    AuthTokenPayload,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from learnpath.schemas.user_schemas import User, UserResponse
from learnpath.schemas.profile_schemas import (
    AssessmentRecommendation,
    AssessmentRecord,
    AssessmentResponse,
    LearnerProfile,
    Preferences,
    SetGoalRequest,
    UpdateProfileRequest,
)
from learnpath.schemas.assessment_schemas import (
    AssessmentSubmitRequest,
    AssessmentSubmitResponse,
    CategoryStats,
    PublicQuestion,
    Question,
    QuestionOption,
    QuestionScore,
    QuizSubmitRequest,
    ScoreRecommendation,
)
from learnpath.schemas.goal_schemas import (
    Goal,
    GoalModule,
    GoalWithScore,
    Prerequisite,
    Resource,
    Skill,
)
from learnpath.schemas.pathway_schemas import (
    AdaptiveRecommendation,
    CognitiveLoad,
    DashboardResponse,
    GeneratePathwayRequest,
    LearningStats,
    Milestone,
    ModuleProgress,
    Pathway,
    PathwayStatus,
    PrerequisiteReport,
    QuizAttempt,
    QuizProgress,
    QuizSubmitResponse,
    RecommendationActionRequest,
    ResourceProgress,
    ResourceProgressRequest,
    Schedule,
    SessionPlan,
    StatusActionRequest,
)
from learnpath.schemas.insight_schemas import (
    AdaptiveSuggestion,
    InsightRecommendation,
    LearningInsight,
    LearningPatterns,
    LoadTrend,
    PerformancePrediction,
    SmartRecommendations,
    TimePatterns,
)

__all__ = [
    # auth
    "AuthTokenPayload",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RegisterRequest",
    "RegisterResponse",
    # user
    "User",
    "UserResponse",
    # profile
    "AssessmentRecommendation",
    "AssessmentRecord",
    "AssessmentResponse",
    "LearnerProfile",
    "Preferences",
    "SetGoalRequest",
    "UpdateProfileRequest",
    # assessment
    "AssessmentSubmitRequest",
    "AssessmentSubmitResponse",
    "CategoryStats",
    "PublicQuestion",
    "Question",
    "QuestionOption",
    "QuestionScore",
    "QuizSubmitRequest",
    "ScoreRecommendation",
    # goal
    "Goal",
    "GoalModule",
    "GoalWithScore",
    "Prerequisite",
    "Resource",
    "Skill",
    # pathway
    "AdaptiveRecommendation",
    "CognitiveLoad",
    "DashboardResponse",
    "GeneratePathwayRequest",
    "LearningStats",
    "Milestone",
    "ModuleProgress",
    "Pathway",
    "PathwayStatus",
    "PrerequisiteReport",
    "QuizAttempt",
    "QuizProgress",
    "QuizSubmitResponse",
    "RecommendationActionRequest",
    "ResourceProgress",
    "ResourceProgressRequest",
    "Schedule",
    "SessionPlan",
    "StatusActionRequest",
    # insights
    "AdaptiveSuggestion",
    "InsightRecommendation",
    "LearningInsight",
    "LearningPatterns",
    "LoadTrend",
    "PerformancePrediction",
    "SmartRecommendations",
    "TimePatterns",
]
