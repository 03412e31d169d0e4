"""
Prerequisite checking: learner skill levels vs. a goal's declared prerequisite groups.
"""

from __future__ import annotations

from typing import Iterable, Optional

from learnpath.schemas.goal_schemas import Goal, Skill
from learnpath.schemas.pathway_schemas import PrerequisiteReport
from learnpath.schemas.profile_schemas import SKILL_LEVELS, LearnerProfile
from learnpath.utils.logger import configure_logging

logger = configure_logging()

# Goal skills are authored on a basic/intermediate/advanced scale; basic sits with beginner.
_LEVEL_ALIASES = {"basic": "beginner"}


def level_rank(level: Optional[str]) -> int:
    """Index on the beginner < intermediate < advanced < expert scale, -1 if unknown."""
    if not level:
        return -1
    name = _LEVEL_ALIASES.get(level.lower(), level.lower())
    return SKILL_LEVELS.index(name) if name in SKILL_LEVELS else -1


def has_required_level(learner_level: Optional[str], required: Iterable[Skill]) -> bool:
    learner_rank = level_rank(learner_level)
    return all(learner_rank >= level_rank(skill.level) for skill in required)


def check_prerequisites(profile: LearnerProfile, goal: Goal) -> PrerequisiteReport:
    report = PrerequisiteReport()
    learner_levels = {
        "math": profile.preferences.math_level,
        "programming": profile.preferences.programming_level,
    }

    for prereq in goal.prerequisites:
        category = prereq.category.lower()
        if category not in learner_levels:
            # No profile field to compare theory/tools against.
            report.unchecked.append(prereq)
            continue
        if has_required_level(learner_levels[category], prereq.skills):
            report.met.append(prereq)
        else:
            report.missing.append(prereq)

    logger.debug(
        "prerequisites user_id=%s goal=%s met=%d missing=%d unchecked=%d",
        profile.user_id,
        goal.id,
        len(report.met),
        len(report.missing),
        len(report.unchecked),
    )
    return report
