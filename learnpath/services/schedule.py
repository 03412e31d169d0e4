"""
Schedule estimation: total hours, weekly session plan and projected completion date.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from statistics import mean, pstdev
from typing import Optional, Sequence

from learnpath.schemas.goal_schemas import GoalModule
from learnpath.schemas.pathway_schemas import Schedule, SessionPlan
from learnpath.schemas.profile_schemas import LearnerProfile
from learnpath.utils.common import round_half_up, utcnow

BASE_HOURS_PER_WEEK = 10
SESSION_MINUTES = 120


def session_regularity(profile: LearnerProfile) -> float:
    """1 / (1 + stddev/mean) over gaps between assessment timestamps; 1 with too little data."""
    stamps = sorted(a.completed_at for a in profile.assessments)
    if len(stamps) < 2:
        return 1.0
    gaps = [(b - a).total_seconds() for a, b in zip(stamps, stamps[1:])]
    avg = mean(gaps)
    if avg <= 0:
        return 1.0
    return 1 / (1 + pstdev(gaps) / avg)


def engagement_multiplier(profile: LearnerProfile) -> float:
    if not profile.assessments:
        return 1.0
    regularity = session_regularity(profile)
    if regularity > 0.8:
        return 1.2
    if regularity < 0.4:
        return 0.8
    return 1.0


def hours_per_week(profile: LearnerProfile) -> int:
    return round_half_up(BASE_HOURS_PER_WEEK * engagement_multiplier(profile))


def session_intensity(profile: LearnerProfile) -> str:
    recent = sorted(profile.assessments, key=lambda a: a.completed_at, reverse=True)[:3]
    if not recent:
        return "medium"
    average = sum(a.score for a in recent) / len(recent)
    if average > 85:
        return "high"
    if average < 60:
        return "low"
    return "medium"


def session_plan(weekly_hours: int, profile: LearnerProfile) -> list[SessionPlan]:
    intensity = session_intensity(profile)
    return [
        SessionPlan(
            duration_minutes=SESSION_MINUTES,
            type="learning" if i % 2 == 0 else "practice",
            intensity=intensity,
        )
        for i in range(math.ceil(weekly_hours / 2))
    ]


def estimate_schedule(
    modules: Sequence[GoalModule], profile: LearnerProfile, now: Optional[datetime] = None
) -> Schedule:
    now = now or utcnow()
    total_hours = sum(m.duration for m in modules)
    weekly = hours_per_week(profile)
    weeks = math.ceil(total_hours / weekly)

    free, premium = [], []
    for module in modules:
        for resource in module.resources:
            (premium if resource.is_premium else free).append(resource)

    return Schedule(
        estimated_time_hours=total_hours,
        free_resources=free,
        premium_resources=premium,
        weeks_needed=weeks,
        hours_per_week=weekly,
        sessions=session_plan(weekly, profile),
        completion_date=now + timedelta(days=weeks * 7),
    )
