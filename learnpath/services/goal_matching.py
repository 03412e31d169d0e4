"""
Goal listing with per-learner match scores.
"""

from __future__ import annotations

from typing import Optional

from learnpath.schemas.goal_schemas import Goal, GoalWithScore
from learnpath.schemas.profile_schemas import AssessmentRecord, LearnerProfile
from learnpath.services.prerequisites import check_prerequisites
from learnpath.services.profile_service import latest_assessment, recommended_level
from learnpath.services.repositories import GoalRepository

LEVEL_MATCH_POINTS = 40
DOMAIN_MATCH_POINTS = 30
PREREQUISITE_MATCH_POINTS = 30


def match_score(goal: Goal, profile: Optional[LearnerProfile], assessment: Optional[AssessmentRecord]) -> int:
    if profile is None or assessment is None:
        return 0
    score = 0
    if goal.level == recommended_level(assessment.score):
        score += LEVEL_MATCH_POINTS
    if goal.category == profile.preferences.preferred_domain:
        score += DOMAIN_MATCH_POINTS
    if not check_prerequisites(profile, goal).missing:
        score += PREREQUISITE_MATCH_POINTS
    return score


def list_goals(
    goals: GoalRepository,
    category: Optional[str] = None,
    level: Optional[str] = None,
    profile: Optional[LearnerProfile] = None,
) -> list[GoalWithScore]:
    """
    Goals filtered by category/level, best match first.

    With a profile, missing filters default to the preferred domain and to the level
    recommended by the latest assessment (beginner without one). "all" disables a filter.
    """

    latest = latest_assessment(profile) if profile is not None else None
    if profile is not None:
        if category is None:
            category = profile.preferences.preferred_domain
        if level is None:
            level = recommended_level(latest.score) if latest else "beginner"

    found = goals.find(
        category=None if category == "all" else category,
        level=None if level == "all" else level,
    )

    scored = []
    for goal in found:
        is_recommended = bool(
            profile is not None
            and latest is not None
            and goal.level == recommended_level(latest.score)
            and goal.category == profile.preferences.preferred_domain
        )
        scored.append(
            GoalWithScore(
                **goal.model_dump(),
                is_recommended=is_recommended,
                match_score=match_score(goal, profile, latest),
            )
        )
    scored.sort(key=lambda g: g.match_score, reverse=True)
    return scored
