"""
In-memory repositories and builders shared by the unit and integration tests.
"""
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import uuid4

from learnpath.schemas.assessment_schemas import Question, QuestionOption
from learnpath.schemas.goal_schemas import Goal, GoalModule, Prerequisite, Resource
from learnpath.schemas.pathway_schemas import Pathway, PathwayStatus, QuizAttempt
from learnpath.schemas.profile_schemas import AssessmentRecord, AssessmentResponse, LearnerProfile
from learnpath.services.errors import ConflictError, NotFoundError
from learnpath.services.repositories import (
    GoalRepository,
    PathwayRepository,
    ProfileRepository,
    QuizAttemptRepository,
)

NOW = datetime(2025, 3, 10, 12, 0, 0)

# ----- In-memory repositories -----

class InMemoryProfileRepository(ProfileRepository):
    def __init__(self, profiles: Iterable[LearnerProfile] = ()):
        self._items = {p.user_id: p.model_copy(deep=True) for p in profiles}

    def get(self, user_id: int) -> Optional[LearnerProfile]:
        p = self._items.get(user_id)
        return p.model_copy(deep=True) if p else None

    def get_or_create(self, user_id: int) -> LearnerProfile:
        if user_id not in self._items:
            self._items[user_id] = LearnerProfile(user_id=user_id)
        return self.get(user_id)

    def upsert_preferences(self, user_id, learning_style, preferences):
        p = self._items.setdefault(user_id, LearnerProfile(user_id=user_id))
        p.learning_style = learning_style
        p.preferences = preferences.model_copy()
        return self.get(user_id)

    def append_assessment(self, user_id, record):
        if user_id not in self._items:
            raise NotFoundError("profile not found")
        self._items[user_id].assessments.append(record.model_copy(deep=True))
        return self.get(user_id)

    def set_goal(self, user_id, goal_id):
        if user_id not in self._items:
            raise NotFoundError("profile not found")
        self._items[user_id].goal_id = goal_id
        return self.get(user_id)


class InMemoryGoalRepository(GoalRepository):
    def __init__(self, goals: Iterable[Goal] = ()):
        self._items = {}
        for g in goals:
            self.add(g)

    def get(self, goal_id):
        g = self._items.get(goal_id)
        return g.model_copy(deep=True) if g else None

    def find(self, category=None, level=None, exclude_id=None, limit=None) -> List[Goal]:
        out = [
            g.model_copy(deep=True)
            for g in self._items.values()
            if (category is None or g.category == category)
            and (level is None or g.level == level)
            and (exclude_id is None or g.id != exclude_id)
        ]
        return out[:limit] if limit else out

    def add(self, goal):
        goal = goal.model_copy(update={"id": goal.id or str(uuid4())}, deep=True)
        self._items[goal.id] = goal
        return self.get(goal.id)


class InMemoryPathwayRepository(PathwayRepository):
    def __init__(self):
        self._items: dict[str, Pathway] = {}

    def get(self, pathway_id, user_id=None):
        p = self._items.get(pathway_id)
        if p is None or (user_id is not None and p.user_id != user_id):
            return None
        return p.model_copy(deep=True)

    def find_active(self, user_id, goal_id):
        for p in self._items.values():
            if p.user_id == user_id and p.goal_id == goal_id and p.status != PathwayStatus.COMPLETED:
                return p.model_copy(deep=True)
        return None

    def list_for_user(self, user_id, statuses=None):
        wanted = set(statuses) if statuses is not None else None
        return [
            p.model_copy(deep=True)
            for p in self._items.values()
            if p.user_id == user_id and (wanted is None or p.status in wanted)
        ]

    def create(self, pathway):
        if self.find_active(pathway.user_id, pathway.goal_id) is not None:
            raise ConflictError("active pathway exists")
        stored = pathway.model_copy(update={"id": pathway.id or str(uuid4()), "version": 1}, deep=True)
        self._items[stored.id] = stored
        return stored.model_copy(deep=True)

    def save(self, pathway):
        current = self._items.get(pathway.id)
        if current is None:
            raise NotFoundError("pathway not found")
        if current.version != pathway.version:
            raise ConflictError("stale pathway")
        stored = pathway.model_copy(update={"version": pathway.version + 1}, deep=True)
        self._items[stored.id] = stored
        return stored.model_copy(deep=True)


class InMemoryQuizAttemptRepository(QuizAttemptRepository):
    def __init__(self):
        self._items: list[QuizAttempt] = []

    def record(self, attempt):
        stored = attempt.model_copy(update={"id": attempt.id or str(uuid4())}, deep=True)
        self._items.append(stored)
        return stored

    def list_for_module(self, user_id, pathway_id, module_index):
        found = [
            a for a in self._items
            if (a.user_id, a.pathway_id, a.module_index) == (user_id, pathway_id, module_index)
        ]
        return sorted(found, key=lambda a: a.completed_at, reverse=True)

    def list_for_user(self, user_id, limit=None):
        found = sorted((a for a in self._items if a.user_id == user_id), key=lambda a: a.completed_at, reverse=True)
        return found[:limit] if limit else found

    def delete_for_module(self, user_id, pathway_id, module_index):
        before = len(self._items)
        self._items = [
            a for a in self._items
            if (a.user_id, a.pathway_id, a.module_index) != (user_id, pathway_id, module_index)
        ]
        return before - len(self._items)


# ----- Builders -----

def make_question(qid: str, difficulty: str = "intermediate", category: Optional[str] = None) -> Question:
    return Question(
        id=qid,
        text=f"Question {qid}",
        difficulty=difficulty,
        category=category,
        options=[
            QuestionOption(id="a", text="right", is_correct=True),
            QuestionOption(id="b", text="wrong", is_correct=False),
        ],
    )


def make_assessment(category: str, score: float, completed_at: datetime, time_spent: float = 0.0) -> AssessmentRecord:
    return AssessmentRecord(
        category=category,
        score=score,
        responses=[AssessmentResponse(question_id=f"{category}-1", time_spent=time_spent)],
        completed_at=completed_at,
    )


def make_module(title: str, n_resources: int = 2, duration: float = 10, quiz: bool = True) -> GoalModule:
    return GoalModule(
        title=title,
        duration=duration,
        resources=[
            Resource(id=f"{title}-r{i}", title=f"{title} resource {i}", url=f"https://example.com/{title}/{i}", type="video")
            for i in range(n_resources)
        ],
        quiz_questions=[make_question(f"{title}-q{i}") for i in range(3)] if quiz else [],
    )


def make_goal(
    goal_id: str = "goal-ml",
    category: str = "ml",
    level: str = "beginner",
    n_modules: int = 3,
    prerequisites: Optional[list[Prerequisite]] = None,
) -> Goal:
    return Goal(
        id=goal_id,
        title=f"Goal {goal_id}",
        description="A learning goal",
        category=category,
        level=level,
        estimated_duration=30,
        prerequisites=prerequisites or [],
        modules=[make_module(f"m{i}") for i in range(n_modules)],
    )


# ----- HTTP -----

PASSWORD = "testpass123"


def register(client, email: str = "test@example.com", password: str = PASSWORD):
    return client.post(
        "/auth/register",
        json={"email": email, "password": password, "confirm_password": password},
    )
