"""
Learner dashboard: pathway lists, learning stats and upcoming milestones.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Sequence

from learnpath.schemas.goal_schemas import Goal
from learnpath.schemas.pathway_schemas import (
    DashboardResponse,
    LearningStats,
    Milestone,
    Pathway,
    PathwayStatus,
)
from learnpath.services.repositories import GoalRepository, PathwayRepository
from learnpath.utils.common import round_half_up, utcnow

HOURS_PER_RESOURCE = 0.6
HOURS_PER_QUIZ = 0.33
MAX_STREAK_DAYS = 30
DAYS_PER_MODULE = 7


def _activity_days(pathways: Iterable[Pathway]) -> set[date]:
    days = set()
    for pathway in pathways:
        for module in pathway.module_progress:
            days.update(r.completed_at.date() for r in module.resources if r.completed_at)
            if module.quiz.completed_at:
                days.add(module.quiz.completed_at.date())
    return days


def streak_days(pathways: Iterable[Pathway], today: date) -> int:
    """Consecutive activity days ending today or yesterday, capped."""
    days = _activity_days(pathways)
    if not days:
        return 0
    latest = max(days)
    if latest < today - timedelta(days=1):
        return 0
    streak = 0
    cursor = latest
    while cursor in days and streak < MAX_STREAK_DAYS:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def learning_stats(pathways: Sequence[Pathway], today: date) -> LearningStats:
    hours = 0.0
    resources = 0
    quiz_scores = []
    for pathway in pathways:
        for module in pathway.module_progress:
            done = sum(1 for r in module.resources if r.completed)
            resources += done
            hours += done * HOURS_PER_RESOURCE
            if module.quiz.completed and module.quiz.score is not None:
                quiz_scores.append(module.quiz.score)
                hours += HOURS_PER_QUIZ
    return LearningStats(
        total_hours_spent=round_half_up(hours),
        completed_resources=resources,
        average_quiz_score=round_half_up(sum(quiz_scores) / len(quiz_scores)) if quiz_scores else 0,
        streak_days=streak_days(pathways, today),
    )


def next_milestone(pathway: Pathway, goal: Goal, now: datetime) -> Optional[Milestone]:
    if not goal.modules:
        return None
    index = min(pathway.current_module, len(goal.modules) - 1)
    remaining = len(goal.modules) - pathway.current_module
    return Milestone(
        pathway_id=pathway.id,
        goal_title=goal.title,
        module_name=goal.modules[index].title,
        due_date=now + timedelta(days=remaining * DAYS_PER_MODULE),
    )


def build_dashboard(
    user_id: int,
    pathways: PathwayRepository,
    goals: GoalRepository,
    now: Optional[datetime] = None,
) -> DashboardResponse:
    now = now or utcnow()
    active = pathways.list_for_user(user_id, statuses=[PathwayStatus.ACTIVE, PathwayStatus.PAUSED])
    completed = pathways.list_for_user(user_id, statuses=[PathwayStatus.COMPLETED])

    milestones = []
    for pathway in active:
        goal = goals.get(pathway.goal_id)
        if goal is None:
            continue
        milestone = next_milestone(pathway, goal, now)
        if milestone is not None:
            milestones.append(milestone)

    return DashboardResponse(
        learning_stats=learning_stats(active + completed, now.date()),
        active_pathways=active,
        completed_pathways=completed,
        next_milestones=milestones,
    )
