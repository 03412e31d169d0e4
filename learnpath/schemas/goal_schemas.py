"""
Learning goal (curriculum) schemas: prerequisites, ordered modules and their resources.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from learnpath.schemas.assessment_schemas import Question

GoalCategory = Literal[
    "ml",
    "dl",
    "data_science",
    "mlops",
    "computer_vision",
    "nlp",
    "robotics",
    "quantum_ml",
    "programming",
    "math",
]
GoalLevel = Literal["beginner", "intermediate", "advanced"]
PrerequisiteCategory = Literal["math", "programming", "theory", "tools"]
ResourceType = Literal["article", "video", "course", "book", "use_case"]

GOAL_LEVELS = ("beginner", "intermediate", "advanced")


class Skill(BaseModel):
    name: str = ""
    level: Optional[str] = None  # basic|intermediate|advanced


class Prerequisite(BaseModel):
    category: PrerequisiteCategory
    skills: list[Skill] = Field(default_factory=list)


class Resource(BaseModel):
    id: Optional[str] = None
    title: str
    url: str
    type: ResourceType = "article"
    duration: float = 0
    level: Optional[str] = None
    is_premium: bool = False

    @property
    def resource_id(self) -> str:
        return self.id or self.url


class GoalModule(BaseModel):
    title: str
    description: str = ""
    duration: float  # hours
    category: Optional[str] = None  # falls back to the goal's category
    skills: list[Skill] = Field(default_factory=list)
    resources: list[Resource] = Field(default_factory=list)
    validation_criteria: list[str] = Field(default_factory=list)
    quiz_questions: list[Question] = Field(default_factory=list)


class Goal(BaseModel):
    id: Optional[str] = None
    title: str
    description: str
    category: GoalCategory
    level: GoalLevel
    estimated_duration: float = Field(ge=1)
    prerequisites: list[Prerequisite] = Field(default_factory=list)
    modules: list[GoalModule] = Field(default_factory=list)


class GoalWithScore(Goal):
    is_recommended: bool = False
    match_score: int = 0
