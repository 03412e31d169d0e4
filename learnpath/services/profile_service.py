"""
Learner profile service: preferences, goal selection and server-side scored assessments.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence
from datetime import datetime

from learnpath.schemas.assessment_schemas import AssessmentSubmitResponse, Question
from learnpath.schemas.profile_schemas import (
    AssessmentRecommendation,
    AssessmentRecord,
    AssessmentResponse,
    LearnerProfile,
    Preferences,
)
from learnpath.services.errors import NotFoundError
from learnpath.services.question_bank import QuestionBank, get_question_bank
from learnpath.services.repositories import GoalRepository, ProfileRepository
from learnpath.services.scoring import recommendations_from_stats, score_by_category, score_overall
from learnpath.utils.common import utcnow
from learnpath.utils.logger import configure_logging

logger = configure_logging()

LEVEL_CATEGORIES = {
    "math": "math_level",
    "programming": "programming_level",
}


def recommended_level(score: float) -> str:
    """Goal level suggested by an assessment score."""
    if score >= 80:
        return "advanced"
    if score >= 50:
        return "intermediate"
    return "beginner"


def latest_assessment(profile: LearnerProfile) -> Optional[AssessmentRecord]:
    if not profile.assessments:
        return None
    return max(profile.assessments, key=lambda a: a.completed_at)


class ProfileService:
    def __init__(
        self,
        profiles: ProfileRepository,
        goals: Optional[GoalRepository] = None,
        question_bank: Optional[QuestionBank] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.profiles = profiles
        self.goals = goals
        self._question_bank = question_bank
        self.clock = clock

    @property
    def question_bank(self) -> QuestionBank:
        if self._question_bank is None:
            self._question_bank = get_question_bank()
        return self._question_bank

    def get_profile(self, user_id: int) -> LearnerProfile:
        return self.profiles.get_or_create(user_id)

    def update_preferences(self, user_id: int, learning_style: str, preferences: Preferences) -> LearnerProfile:
        profile = self.profiles.upsert_preferences(user_id, learning_style, preferences)
        logger.info("profile updated user_id=%s style=%s", user_id, learning_style)
        return profile

    def set_goal(self, user_id: int, goal_id: str) -> LearnerProfile:
        if self.goals is not None and self.goals.get(goal_id) is None:
            raise NotFoundError(f"Goal {goal_id} not found")
        if self.profiles.get(user_id) is None:
            raise NotFoundError(f"Learner profile for user {user_id} not found")
        return self.profiles.set_goal(user_id, goal_id)

    def assessment_history(self, user_id: int) -> list[AssessmentRecord]:
        profile = self.profiles.get(user_id)
        if profile is None:
            raise NotFoundError(f"Learner profile for user {user_id} not found")
        return profile.assessments

    def submit_assessment(
        self,
        user_id: int,
        category: str,
        responses: Sequence[AssessmentResponse],
        questions: Optional[Sequence[Question]] = None,
    ) -> AssessmentSubmitResponse:
        """
        Score an assessment against the question bank and append it to the history.

        Math/programming results move the matching skill level; domain categories set
        the preferred domain.
        """

        questions = list(questions) if questions is not None else self.question_bank.questions(category)
        score = score_overall(questions, responses)
        stats = score_by_category(questions, responses, default_category=category)
        recs = recommendations_from_stats(stats)

        profile = self.profiles.get_or_create(user_id)
        record = AssessmentRecord(
            category=category,
            score=score,
            responses=list(responses),
            recommendations=[
                AssessmentRecommendation(
                    category=cat,
                    score=round(s.average_score, 2),
                    recommendations=[r.message for r in recs if r.category == cat],
                )
                for cat, s in stats.items()
            ],
            completed_at=self.clock(),
        )
        self.profiles.append_assessment(user_id, record)

        preferences = profile.preferences.model_copy()
        if category in LEVEL_CATEGORIES:
            setattr(preferences, LEVEL_CATEGORIES[category], recommended_level(score))
        else:
            preferences.preferred_domain = category
        profile = self.profiles.upsert_preferences(user_id, profile.learning_style, preferences)

        logger.info("assessment submitted user_id=%s category=%s score=%s", user_id, category, score)
        return AssessmentSubmitResponse(
            score=score,
            category_stats=stats,
            recommendations=recs,
            profile=profile,
        )
