"""
Pure pathway state transitions.

Every function takes a Pathway value and mutates or returns it explicitly; nothing
here touches storage. The orchestrator in `pathway_service` persists the results.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from learnpath.schemas.goal_schemas import Goal, GoalModule
from learnpath.schemas.pathway_schemas import (
    AdaptiveRecommendation,
    CognitiveLoad,
    ModuleProgress,
    Pathway,
    PathwayStatus,
    PrerequisiteReport,
    QuizProgress,
    ResourceProgress,
)
from learnpath.schemas.profile_schemas import LearnerProfile
from learnpath.services.errors import InvalidStateError, NotFoundError
from learnpath.services.question_bank import QUIZ_PASSING_SCORE
from learnpath.utils.common import round_half_up

NEXT_LEVEL = {
    "beginner": "intermediate",
    "intermediate": "advanced",
    "advanced": "advanced",
}


def build_module_progress(modules: Sequence[GoalModule]) -> list[ModuleProgress]:
    return [
        ModuleProgress(
            module_index=i,
            completed=False,
            locked=i != 0,
            resources=[ResourceProgress(resource_id=r.resource_id) for r in module.resources],
            quiz=QuizProgress(),
        )
        for i, module in enumerate(modules)
    ]


def initial_recommendations(
    profile: LearnerProfile, prerequisites: PrerequisiteReport, cognitive_load: CognitiveLoad
) -> list[AdaptiveRecommendation]:
    recs = []
    if prerequisites.missing:
        categories = ", ".join(p.category for p in prerequisites.missing)
        recs.append(
            AdaptiveRecommendation(
                type="review",
                description=f"Review the missing prerequisites first ({categories})",
                priority="high",
            )
        )
    recs.append(
        AdaptiveRecommendation(
            type="resource",
            description=f"Resources are selected for your {profile.learning_style} learning style",
            priority="medium",
        )
    )
    if cognitive_load.practice_frequency == "high":
        recs.append(
            AdaptiveRecommendation(
                type="practice",
                description="Frequent hands-on practice is recommended",
                priority="high",
            )
        )
    return recs


def ensure_mutable(pathway: Pathway) -> None:
    if pathway.status == PathwayStatus.COMPLETED:
        raise InvalidStateError(f"Pathway {pathway.id} is completed")


def module_entry(pathway: Pathway, module_index: int) -> ModuleProgress:
    if not 0 <= module_index < len(pathway.module_progress):
        raise NotFoundError(f"Module {module_index} not found")
    return pathway.module_progress[module_index]


def refresh_module_completion(module: ModuleProgress) -> bool:
    """Mark the module completed when its resources and a passing quiz are done. Never un-completes."""
    if module.completed:
        return True
    quiz_passed = module.quiz.completed and (module.quiz.score or 0) >= QUIZ_PASSING_SCORE
    if not module.locked and quiz_passed and all(r.completed for r in module.resources):
        module.completed = True
    return module.completed


def set_resource_completed(
    pathway: Pathway, module_index: int, resource_id: str, completed: bool, now: datetime
) -> ModuleProgress:
    ensure_mutable(pathway)
    module = module_entry(pathway, module_index)
    if module.locked:
        raise InvalidStateError(f"Module {module_index} is locked")
    resource = next((r for r in module.resources if r.resource_id == resource_id), None)
    if resource is None:
        raise NotFoundError(f"Resource {resource_id} not found in module {module_index}")
    if module.completed and not completed:
        raise InvalidStateError(f"Module {module_index} is already completed")

    # Repeating a completion keeps the first completion time.
    if not completed:
        resource.completed_at = None
    elif not resource.completed:
        resource.completed_at = now
    resource.completed = completed
    refresh_module_completion(module)
    return module


def set_quiz_result(pathway: Pathway, module_index: int, score: float, now: datetime) -> ModuleProgress:
    ensure_mutable(pathway)
    module = module_entry(pathway, module_index)
    if module.locked:
        raise InvalidStateError(f"Module {module_index} is locked")

    # A retake on a completed module can only raise the stored score.
    if module.completed and module.quiz.score is not None:
        score = max(score, module.quiz.score)
    module.quiz = QuizProgress(completed=True, score=score, completed_at=now)
    refresh_module_completion(module)
    return module


def reset_quiz(pathway: Pathway, module_index: int) -> ModuleProgress:
    ensure_mutable(pathway)
    module = module_entry(pathway, module_index)
    if module.completed:
        raise InvalidStateError(f"Module {module_index} is already completed")
    module.quiz = QuizProgress()
    return module


def update_progress(pathway: Pathway, now: datetime) -> bool:
    """
    Recompute progress, the completion estimate and unlock state.

    Returns True when the last module is completed and progress reached 100; the
    caller then suggests next goals and closes the pathway.
    """

    ensure_mutable(pathway)
    modules = pathway.module_progress
    total = len(modules)
    done = sum(1 for m in modules if m.completed)
    pathway.progress = round_half_up(100 * done / total) if total else 0

    elapsed = (now - pathway.started_at).total_seconds()
    if pathway.progress > 0 and elapsed > 0:
        rate = pathway.progress / elapsed
        pathway.estimated_completion_date = now + timedelta(seconds=(100 - pathway.progress) / rate)

    pathway.last_accessed_at = now

    current = modules[pathway.current_module] if pathway.current_module < total else None
    if current is None or not current.completed:
        return False
    if pathway.current_module + 1 < total:
        modules[pathway.current_module + 1].locked = False
        pathway.current_module += 1
        return False
    return pathway.progress == 100


def generate_recommendations(pathway: Pathway, goal: Optional[Goal] = None) -> list[AdaptiveRecommendation]:
    """Clear and rebuild recommendations for the current module only."""
    ensure_mutable(pathway)
    recs: list[AdaptiveRecommendation] = []
    if pathway.current_module < len(pathway.module_progress):
        module = pathway.module_progress[pathway.current_module]
        title = None
        if goal is not None and pathway.current_module < len(goal.modules):
            title = goal.modules[pathway.current_module].title
        label = f"'{title}'" if title else f"module {pathway.current_module + 1}"

        pending = [r for r in module.resources if not r.completed]
        if pending:
            recs.append(
                AdaptiveRecommendation(
                    type="practice",
                    description=f"Finish the {len(pending)} remaining resource(s) of {label}",
                    priority="high",
                )
            )
        if not module.quiz.completed:
            recs.append(
                AdaptiveRecommendation(
                    type="practice",
                    description=f"Take the quiz for {label}",
                    priority="high",
                )
            )
        elif (module.quiz.score or 0) < QUIZ_PASSING_SCORE:
            recs.append(
                AdaptiveRecommendation(
                    type="review",
                    description=f"Review {label} and retake the quiz (score {round_half_up(module.quiz.score or 0)}%)",
                    priority="medium",
                )
            )
    pathway.adaptive_recommendations = recs
    return recs


def transition_status(pathway: Pathway, action: str, now: datetime) -> Pathway:
    allowed = {
        ("pause", PathwayStatus.ACTIVE): PathwayStatus.PAUSED,
        ("resume", PathwayStatus.PAUSED): PathwayStatus.ACTIVE,
        ("complete", PathwayStatus.ACTIVE): PathwayStatus.COMPLETED,
        ("complete", PathwayStatus.PAUSED): PathwayStatus.COMPLETED,
    }
    target = allowed.get((action, pathway.status))
    if target is None:
        raise InvalidStateError(f"Cannot {action} a {pathway.status.value} pathway")
    pathway.status = target
    pathway.last_accessed_at = now
    if target == PathwayStatus.COMPLETED:
        pathway.completed_at = now
    return pathway


RECOMMENDATION_ACTIONS = {
    "start": "pending",
    "skip": "skipped",
    "complete": "completed",
}


def set_recommendation_status(pathway: Pathway, index: int, action: str) -> AdaptiveRecommendation:
    ensure_mutable(pathway)
    if action not in RECOMMENDATION_ACTIONS:
        raise InvalidStateError(f"Unknown recommendation action {action}")
    if not 0 <= index < len(pathway.adaptive_recommendations):
        raise NotFoundError(f"Recommendation {index} not found")
    rec = pathway.adaptive_recommendations[index]
    rec.status = RECOMMENDATION_ACTIONS[action]
    return rec
