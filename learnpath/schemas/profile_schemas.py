"""
Learner profile schemas: learning style, skill levels, preferences and assessment history.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

LearningStyle = Literal["visual", "auditory", "reading", "kinesthetic"]
SkillLevel = Literal["beginner", "intermediate", "advanced", "expert"]
# Kept separate from GoalCategory: the two sets differ (no data_science here).
PreferredDomain = Literal["ml", "dl", "computer_vision", "nlp", "mlops"]
AssessmentCategory = Literal["math", "programming", "ml", "dl", "computer_vision", "nlp", "mlops"]

# Order = progression order.
SKILL_LEVELS = ("beginner", "intermediate", "advanced", "expert")
PREFERRED_DOMAINS = ("ml", "dl", "computer_vision", "nlp", "mlops")
ASSESSMENT_CATEGORIES = ("math", "programming", "ml", "dl", "computer_vision", "nlp", "mlops")


class Preferences(BaseModel):
    math_level: SkillLevel = "beginner"
    programming_level: SkillLevel = "beginner"
    preferred_domain: PreferredDomain = "ml"


class AssessmentResponse(BaseModel):
    """One answered question inside an assessment or quiz submission."""
    question_id: str
    selected_option: Optional[str] = None
    is_correct: Optional[bool] = None  # explicit flag wins over option lookup
    time_spent: float = Field(default=0.0, ge=0)  # seconds
    category: Optional[str] = None
    difficulty: Optional[str] = None


class AssessmentRecommendation(BaseModel):
    category: str
    score: float
    recommendations: list[str] = Field(default_factory=list)


class AssessmentRecord(BaseModel):
    """Append-only entry of a learner's assessment history."""
    category: AssessmentCategory
    score: float = Field(ge=0, le=100)
    responses: list[AssessmentResponse] = Field(default_factory=list)
    recommendations: list[AssessmentRecommendation] = Field(default_factory=list)
    completed_at: datetime


class LearnerProfile(BaseModel):
    user_id: int
    learning_style: LearningStyle = "visual"
    preferences: Preferences = Field(default_factory=Preferences)
    assessments: list[AssessmentRecord] = Field(default_factory=list)
    goal_id: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    learning_style: LearningStyle
    preferences: Preferences


class SetGoalRequest(BaseModel):
    goal_id: str
