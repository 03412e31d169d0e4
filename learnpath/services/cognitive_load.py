"""
Cognitive load estimation.

Derives pacing parameters for a learner from assessment history:
- learning speed: average seconds spent per score point
- retention rate: latest vs. previous score, per category with repeat data
"""

from __future__ import annotations

from collections import defaultdict
from typing import Sequence

from learnpath.schemas.pathway_schemas import CognitiveLoad
from learnpath.schemas.profile_schemas import AssessmentRecord, LearnerProfile
from learnpath.utils.common import round_half_up
from learnpath.utils.logger import configure_logging

logger = configure_logging()

DEFAULT_SPEED = "medium"
DEFAULT_RETENTION = 0.7

FAST_SECONDS_PER_POINT = 30
SLOW_SECONDS_PER_POINT = 60

BASE_CONTENT_AMOUNT = {"fast": 5, "medium": 3, "slow": 2}
BREAK_FREQUENCY_MINUTES = {"fast": 45, "medium": 30, "slow": 20}


def learning_speed(history: Sequence[AssessmentRecord]) -> str:
    if not history:
        return DEFAULT_SPEED

    per_point = [
        sum(r.time_spent for r in a.responses) / a.score
        for a in history
        if a.score > 0
    ]
    if not per_point:
        logger.warning("learning speed: no scored assessments in history, defaulting to %s", DEFAULT_SPEED)
        return DEFAULT_SPEED

    average = sum(per_point) / len(per_point)
    if average < FAST_SECONDS_PER_POINT:
        return "fast"
    if average > SLOW_SECONDS_PER_POINT:
        return "slow"
    return "medium"


def retention_rate(history: Sequence[AssessmentRecord]) -> float:
    by_category: dict[str, list[AssessmentRecord]] = defaultdict(list)
    for a in history:
        by_category[a.category].append(a)

    ratios: list[float] = []
    for records in by_category.values():
        if len(records) < 2:
            continue
        latest, previous = sorted(records, key=lambda a: a.completed_at, reverse=True)[:2]
        if previous.score <= 0:
            continue
        ratios.append(latest.score / previous.score)

    if not ratios:
        if history:
            logger.warning("retention rate: no repeated category in history, defaulting to %s", DEFAULT_RETENTION)
        return DEFAULT_RETENTION
    return sum(ratios) / len(ratios)


def practice_frequency(retention: float) -> str:
    if retention < 0.6:
        return "high"
    if retention < 0.8:
        return "medium"
    return "low"


def estimate_cognitive_load(profile: LearnerProfile) -> CognitiveLoad:
    speed = learning_speed(profile.assessments)
    retention = retention_rate(profile.assessments)
    load = CognitiveLoad(
        content_per_step=round_half_up(BASE_CONTENT_AMOUNT[speed] * retention),
        practice_frequency=practice_frequency(retention),
        break_frequency_minutes=BREAK_FREQUENCY_MINUTES[speed],
        learning_speed=speed,
        retention_rate=retention,
    )
    logger.debug(
        "cognitive load user_id=%s speed=%s retention=%.2f content_per_step=%d",
        profile.user_id,
        speed,
        retention,
        load.content_per_step,
    )
    return load
