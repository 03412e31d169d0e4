"""
Pathway schemas: a learner's adapted progress record against one goal, plus the
intermediate results of pathway generation (cognitive load, prerequisite report, schedule).
"""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field

from learnpath.schemas.goal_schemas import Prerequisite, Resource
from learnpath.schemas.profile_schemas import AssessmentResponse

RecommendationType = Literal["resource", "practice", "review"]
Priority = Literal["high", "medium", "low"]
RecommendationStatus = Literal["pending", "completed", "skipped"]
LearningSpeed = Literal["fast", "medium", "slow"]
Frequency = Literal["low", "medium", "high"]


class PathwayStatus(str, Enum):
    """Pathway status. active <-> paused, active/paused -> completed (terminal)."""
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class ResourceProgress(BaseModel):
    resource_id: str
    completed: bool = False
    completed_at: Optional[datetime] = None


class QuizProgress(BaseModel):
    completed: bool = False
    score: Optional[float] = None
    completed_at: Optional[datetime] = None


class ModuleProgress(BaseModel):
    module_index: int
    completed: bool = False
    locked: bool = True
    resources: list[ResourceProgress] = Field(default_factory=list)
    quiz: QuizProgress = Field(default_factory=QuizProgress)


class AdaptiveRecommendation(BaseModel):
    type: RecommendationType
    description: str
    priority: Priority
    status: RecommendationStatus = "pending"


class Pathway(BaseModel):
    id: Optional[str] = None
    user_id: int
    goal_id: str
    status: PathwayStatus = PathwayStatus.ACTIVE
    progress: int = Field(default=0, ge=0, le=100)
    current_module: int = 0
    module_progress: list[ModuleProgress] = Field(default_factory=list)
    started_at: datetime
    last_accessed_at: datetime
    estimated_completion_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    adaptive_recommendations: list[AdaptiveRecommendation] = Field(default_factory=list)
    next_goals: list[str] = Field(default_factory=list)
    version: int = 0  # optimistic-lock counter, owned by the repository


class CognitiveLoad(BaseModel):
    content_per_step: int
    practice_frequency: Frequency
    break_frequency_minutes: int
    learning_speed: LearningSpeed
    retention_rate: float


class PrerequisiteReport(BaseModel):
    met: list[Prerequisite] = Field(default_factory=list)
    missing: list[Prerequisite] = Field(default_factory=list)
    # theory/tools groups: declared on goals but not compared to any profile field.
    unchecked: list[Prerequisite] = Field(default_factory=list)


class SessionPlan(BaseModel):
    duration_minutes: int = 120
    type: Literal["learning", "practice"]
    intensity: Literal["high", "medium", "low"]


class Schedule(BaseModel):
    estimated_time_hours: float
    free_resources: list[Resource] = Field(default_factory=list)
    premium_resources: list[Resource] = Field(default_factory=list)
    weeks_needed: int
    hours_per_week: int
    sessions: list[SessionPlan] = Field(default_factory=list)
    completion_date: datetime


class QuizAttempt(BaseModel):
    id: Optional[str] = None
    user_id: int
    pathway_id: str
    module_index: int
    score: float
    responses: list[AssessmentResponse] = Field(default_factory=list)
    total_time_spent: float = 0.0
    completed_at: datetime


class LearningStats(BaseModel):
    total_hours_spent: int = 0
    completed_resources: int = 0
    average_quiz_score: int = 0
    streak_days: int = 0


class Milestone(BaseModel):
    pathway_id: Optional[str] = None
    goal_title: str
    module_name: str
    due_date: datetime


class DashboardResponse(BaseModel):
    learning_stats: LearningStats
    active_pathways: list[Pathway]
    completed_pathways: list[Pathway]
    next_milestones: list[Milestone]


# ----- Requests -----

class GeneratePathwayRequest(BaseModel):
    goal_id: str


class ResourceProgressRequest(BaseModel):
    resource_id: str
    completed: bool = True


class RecommendationActionRequest(BaseModel):
    action: Literal["start", "skip", "complete"]


class StatusActionRequest(BaseModel):
    action: Literal["pause", "resume", "complete"]


class QuizSubmitResponse(BaseModel):
    attempt: QuizAttempt
    pathway: Pathway
