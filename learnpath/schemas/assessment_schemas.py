"""
Question bank and scoring schemas.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from learnpath.schemas.profile_schemas import AssessmentCategory, AssessmentResponse, LearnerProfile

Difficulty = Literal["basic", "intermediate", "advanced"]


class QuestionOption(BaseModel):
    id: Optional[str] = None
    text: str
    is_correct: bool = False


class Question(BaseModel):
    id: str
    text: str
    options: list[QuestionOption] = Field(default_factory=list)
    difficulty: str = "intermediate"
    explanation: str = ""
    category: Optional[str] = None


class QuestionScore(BaseModel):
    score: float  # 0..100
    correctness_score: int  # 0 or 1
    time_efficiency: float  # 0..1
    difficulty_bonus: float


class CategoryStats(BaseModel):
    total_questions: int = 0
    correct_answers: int = 0
    total_time: float = 0.0
    accuracy: float = 0.0  # percent
    average_time: float = 0.0  # seconds
    average_score: float = 0.0
    level: str = "beginner"


class ScoreRecommendation(BaseModel):
    type: Literal["review", "practice", "speed"]
    category: str
    priority: Literal["high", "medium", "low"]
    message: str


class PublicOption(BaseModel):
    id: Optional[str] = None
    text: str


class PublicQuestion(BaseModel):
    """Question as served to a learner: correctness flags stripped."""
    id: str
    text: str
    category: Optional[str] = None
    difficulty: str
    options: list[PublicOption]


def _strip_correctness(responses: list[AssessmentResponse]) -> list[AssessmentResponse]:
    # Correctness is decided from the answer key, never taken from the client.
    return [r.model_copy(update={"is_correct": None}) for r in responses]


class AssessmentSubmitRequest(BaseModel):
    category: AssessmentCategory
    responses: list[AssessmentResponse]

    strip_correctness = field_validator("responses")(_strip_correctness)


class AssessmentSubmitResponse(BaseModel):
    score: int
    category_stats: dict[str, CategoryStats]
    recommendations: list[ScoreRecommendation]
    profile: LearnerProfile


class QuizSubmitRequest(BaseModel):
    responses: list[AssessmentResponse]

    strip_correctness = field_validator("responses")(_strip_correctness)
