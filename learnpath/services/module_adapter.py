"""
Module adaptation.

Reshapes a goal's modules for one learner: durations are scaled by math level and
past performance in the module's category, and resources are filtered to the
learner's style, cut to the cognitive-load chunk size and ordered by relevance.
"""

from __future__ import annotations

from typing import Optional, Sequence

from learnpath.schemas.goal_schemas import GoalModule, Resource
from learnpath.schemas.pathway_schemas import CognitiveLoad
from learnpath.schemas.profile_schemas import LearnerProfile
from learnpath.utils.common import round_half_up

LEVEL_DURATION_MULTIPLIERS = {
    "beginner": 1.3,
    "intermediate": 1.0,
    "advanced": 0.8,
}

COMPATIBLE_TYPES = {
    "visual": ("video", "article"),
    "auditory": ("video", "course"),
    "reading": ("article", "book"),
    "kinesthetic": ("use_case", "course"),
}

PREFERRED_TYPE = {
    "visual": "video",
    "auditory": "video",
    "reading": "article",
    "kinesthetic": "use_case",
}


def performance_factor(profile: LearnerProfile, category: Optional[str]) -> float:
    scores = [a.score for a in profile.assessments if category and a.category == category]
    if not scores:
        return 1.0
    average = sum(scores) / len(scores)
    if average > 85:
        return 0.8
    if average < 60:
        return 1.2
    return 1.0


def adapt_duration(duration: float, profile: LearnerProfile, category: Optional[str]) -> int:
    level_multiplier = LEVEL_DURATION_MULTIPLIERS.get(profile.preferences.math_level, 1.0)
    return round_half_up(duration * level_multiplier * performance_factor(profile, category))


def preferred_type(profile: LearnerProfile) -> str:
    return PREFERRED_TYPE.get(profile.learning_style, "article")


def resource_relevance(resource: Resource, profile: LearnerProfile) -> int:
    score = 0
    if resource.type == preferred_type(profile):
        score += 3
    if resource.level is not None and resource.level == profile.preferences.math_level:
        score += 2
    return score


def adapt_resources(
    resources: Sequence[Resource], profile: LearnerProfile, cognitive_load: CognitiveLoad
) -> list[Resource]:
    compatible = COMPATIBLE_TYPES.get(profile.learning_style, ())
    kept = [r for r in resources if r.type in compatible]
    kept = kept[: max(cognitive_load.content_per_step, 0)]
    # sorted() is stable: ties keep filtered order.
    return sorted(kept, key=lambda r: resource_relevance(r, profile), reverse=True)


def adapt_modules(
    modules: Sequence[GoalModule],
    profile: LearnerProfile,
    cognitive_load: CognitiveLoad,
    category: Optional[str] = None,
) -> list[GoalModule]:
    """Return adapted copies of ``modules``; ``category`` is the goal's, used when a module has none."""
    adapted = []
    for module in modules:
        adapted.append(
            module.model_copy(
                update={
                    "duration": adapt_duration(module.duration, profile, module.category or category),
                    "resources": adapt_resources(module.resources, profile, cognitive_load),
                }
            )
        )
    return adapted
