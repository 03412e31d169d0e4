"""
Pytest configuration and shared fixtures for the test suite.
Ensures the project root is importable and provides in-memory repositories,
sample goals/profiles and a fixed clock for the pathway core.
"""
import sys
from datetime import timedelta
from pathlib import Path

import pytest

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from learnpath.schemas.goal_schemas import Goal  # noqa: E402
from learnpath.schemas.profile_schemas import LearnerProfile, Preferences  # noqa: E402
from learnpath.services.question_bank import QuestionBank  # noqa: E402
from tests.helpers import (  # noqa: E402
    NOW,
    InMemoryGoalRepository,
    InMemoryPathwayRepository,
    InMemoryProfileRepository,
    InMemoryQuizAttemptRepository,
    make_goal,
)


@pytest.fixture
def clock():
    """Mutable fixed clock: advance with clock.advance(days=1)."""

    class _Clock:
        now = NOW

        def __call__(self):
            return self.now

        def advance(self, **kwargs):
            self.now = self.now + timedelta(**kwargs)

    return _Clock()


@pytest.fixture
def profile() -> LearnerProfile:
    return LearnerProfile(
        user_id=1,
        learning_style="visual",
        preferences=Preferences(math_level="intermediate", programming_level="intermediate", preferred_domain="ml"),
    )


@pytest.fixture
def goal() -> Goal:
    return make_goal()


@pytest.fixture
def question_bank() -> QuestionBank:
    return QuestionBank.from_dict(
        {
            "ml": [
                {
                    "text": f"ML question {i}",
                    "options": [{"text": "yes", "is_correct": True}, {"text": "no", "is_correct": False}],
                    "difficulty": "basic",
                }
                for i in range(12)
            ],
            "math": [
                {
                    "text": f"Math question {i}",
                    "options": [{"text": "1", "is_correct": True}, {"text": "2", "is_correct": False}],
                    "difficulty": "intermediate",
                }
                for i in range(6)
            ],
        }
    )


@pytest.fixture
def repos(profile, goal):
    return {
        "profiles": InMemoryProfileRepository([profile]),
        "goals": InMemoryGoalRepository([goal]),
        "pathways": InMemoryPathwayRepository(),
        "attempts": InMemoryQuizAttemptRepository(),
    }


@pytest.fixture
def pathway_service(repos, question_bank, clock):
    from learnpath.services.pathway_service import PathwayService

    return PathwayService(
        profiles=repos["profiles"],
        goals=repos["goals"],
        pathways=repos["pathways"],
        attempts=repos["attempts"],
        question_bank=question_bank,
        clock=clock,
    )
