"""
Pathway orchestration: generation and progress events.

Composes the prerequisite checker, cognitive load estimator, module adapter and
schedule estimator into a stored Pathway, and applies progress events
(resources, quizzes, status, recommendations) through the pure transitions in
`pathway_progress`. Storage is reached only through the repository contracts.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional, Sequence

from learnpath.schemas.assessment_schemas import Question
from learnpath.schemas.goal_schemas import Goal
from learnpath.schemas.pathway_schemas import (
    AdaptiveRecommendation,
    Pathway,
    PathwayStatus,
    QuizAttempt,
)
from learnpath.schemas.profile_schemas import AssessmentResponse, LearnerProfile
from learnpath.services import pathway_progress
from learnpath.services.cognitive_load import estimate_cognitive_load
from learnpath.services.errors import ConflictError, NotFoundError
from learnpath.services.module_adapter import adapt_modules
from learnpath.services.prerequisites import check_prerequisites
from learnpath.services.question_bank import QuestionBank, get_question_bank
from learnpath.services.repositories import (
    GoalRepository,
    PathwayRepository,
    ProfileRepository,
    QuizAttemptRepository,
)
from learnpath.services.schedule import estimate_schedule
from learnpath.services.scoring import score_overall
from learnpath.utils.common import utcnow
from learnpath.utils.logger import configure_logging, log_request

logger = configure_logging()

MAX_NEXT_GOALS = 3


class PathwayService:
    """Entry point for pathway generation and progression."""

    def __init__(
        self,
        profiles: ProfileRepository,
        goals: GoalRepository,
        pathways: PathwayRepository,
        attempts: QuizAttemptRepository,
        question_bank: Optional[QuestionBank] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.profiles = profiles
        self.goals = goals
        self.pathways = pathways
        self.attempts = attempts
        self._question_bank = question_bank
        self.clock = clock

    @property
    def question_bank(self) -> QuestionBank:
        if self._question_bank is None:
            self._question_bank = get_question_bank()
        return self._question_bank

    # ----- lookups -----

    def _profile(self, user_id: int) -> LearnerProfile:
        profile = self.profiles.get(user_id)
        if profile is None:
            raise NotFoundError(f"Learner profile for user {user_id} not found")
        return profile

    def _goal(self, goal_id: str) -> Goal:
        goal = self.goals.get(goal_id)
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found")
        return goal

    def get_pathway(self, pathway_id: str, user_id: Optional[int] = None) -> Pathway:
        pathway = self.pathways.get(pathway_id, user_id=user_id)
        if pathway is None:
            raise NotFoundError(f"Pathway {pathway_id} not found")
        return pathway

    # ----- generation -----

    def generate_pathway(self, user_id: int, goal_id: str) -> Pathway:
        """Build (but do not store) an adapted pathway for the user and goal."""
        profile = self._profile(user_id)
        goal = self._goal(goal_id)
        now = self.clock()

        prerequisites = check_prerequisites(profile, goal)
        cognitive_load = estimate_cognitive_load(profile)
        modules = adapt_modules(goal.modules, profile, cognitive_load, category=goal.category)
        schedule = estimate_schedule(modules, profile, now=now)

        logger.info(
            "pathway generated user_id=%s goal=%s modules=%d missing_prereqs=%d weeks=%d",
            user_id,
            goal_id,
            len(modules),
            len(prerequisites.missing),
            schedule.weeks_needed,
        )
        return Pathway(
            user_id=user_id,
            goal_id=goal_id,
            status=PathwayStatus.ACTIVE,
            progress=0,
            current_module=0,
            module_progress=pathway_progress.build_module_progress(modules),
            started_at=now,
            last_accessed_at=now,
            estimated_completion_date=schedule.completion_date,
            adaptive_recommendations=pathway_progress.initial_recommendations(
                profile, prerequisites, cognitive_load
            ),
        )

    def start_pathway(self, user_id: int, goal_id: str) -> Pathway:
        """Generate and store a pathway; Conflict if a non-completed one exists for the goal."""
        with log_request(logger, "start_pathway"):
            if self.pathways.find_active(user_id, goal_id) is not None:
                raise ConflictError(f"An active pathway already exists for goal {goal_id}")
            pathway = self.generate_pathway(user_id, goal_id)
            # The repository's uniqueness guard catches a concurrent insert.
            return self.pathways.create(pathway)

    # ----- progression -----

    def update_progress(self, pathway: Pathway) -> Pathway:
        """Recompute derived state, close the pathway when finished, and persist."""
        now = self.clock()
        finished = pathway_progress.update_progress(pathway, now)
        if finished:
            self.suggest_next_goals(pathway)
            pathway.status = PathwayStatus.COMPLETED
            pathway.completed_at = now
            logger.info("pathway completed id=%s user_id=%s", pathway.id, pathway.user_id)
        return self.pathways.save(pathway)

    def suggest_next_goals(self, pathway: Pathway) -> List[str]:
        goal = self._goal(pathway.goal_id)
        candidates = self.goals.find(
            category=goal.category,
            level=pathway_progress.NEXT_LEVEL.get(goal.level, "advanced"),
            exclude_id=goal.id,
            limit=MAX_NEXT_GOALS,
        )
        pathway.next_goals = [g.id for g in candidates if g.id]
        logger.debug("next goals pathway=%s goals=%s", pathway.id, pathway.next_goals)
        return pathway.next_goals

    def generate_recommendations(self, pathway_id: str, user_id: Optional[int] = None) -> Pathway:
        pathway = self.get_pathway(pathway_id, user_id)
        goal = self._goal(pathway.goal_id)
        pathway_progress.generate_recommendations(pathway, goal)
        return self.pathways.save(pathway)

    def complete_resource(
        self, pathway_id: str, user_id: int, module_index: int, resource_id: str, completed: bool = True
    ) -> Pathway:
        pathway = self.get_pathway(pathway_id, user_id)
        pathway_progress.set_resource_completed(pathway, module_index, resource_id, completed, self.clock())
        logger.debug(
            "resource progress pathway=%s module=%d resource=%s completed=%s",
            pathway_id,
            module_index,
            resource_id,
            completed,
        )
        return self.update_progress(pathway)

    # ----- quizzes -----

    def module_quiz(self, pathway_id: str, user_id: int, module_index: int) -> List[Question]:
        pathway = self.get_pathway(pathway_id, user_id)
        pathway_progress.module_entry(pathway, module_index)
        goal = self._goal(pathway.goal_id)
        if module_index >= len(goal.modules):
            raise NotFoundError(f"Module {module_index} not found")
        return self.question_bank.module_quiz(goal, module_index, pathway_id)

    def submit_quiz(
        self, pathway_id: str, user_id: int, module_index: int, responses: Sequence[AssessmentResponse]
    ) -> tuple[QuizAttempt, Pathway]:
        questions = self.module_quiz(pathway_id, user_id, module_index)
        pathway = self.get_pathway(pathway_id, user_id)
        now = self.clock()

        score = score_overall(questions, responses)
        pathway_progress.set_quiz_result(pathway, module_index, score, now)
        # The pathway write is version-checked; attempts change only once it lands.
        pathway = self.update_progress(pathway)

        attempt = self.attempts.record(
            QuizAttempt(
                user_id=user_id,
                pathway_id=pathway_id,
                module_index=module_index,
                score=score,
                responses=list(responses),
                total_time_spent=sum(r.time_spent for r in responses),
                completed_at=now,
            )
        )
        logger.info("quiz submitted pathway=%s module=%d score=%s", pathway_id, module_index, score)
        return attempt, pathway

    def reset_quiz(self, pathway_id: str, user_id: int, module_index: int) -> Pathway:
        pathway = self.get_pathway(pathway_id, user_id)
        pathway_progress.reset_quiz(pathway, module_index)
        pathway = self.update_progress(pathway)
        deleted = self.attempts.delete_for_module(user_id, pathway_id, module_index)
        logger.info("quiz reset pathway=%s module=%d attempts_deleted=%d", pathway_id, module_index, deleted)
        return pathway

    def list_quiz_attempts(self, pathway_id: str, user_id: int, module_index: int) -> List[QuizAttempt]:
        pathway = self.get_pathway(pathway_id, user_id)
        pathway_progress.module_entry(pathway, module_index)
        return self.attempts.list_for_module(user_id, pathway_id, module_index)

    # ----- status & recommendations -----

    def set_status(self, pathway_id: str, user_id: int, action: str) -> Pathway:
        pathway = self.get_pathway(pathway_id, user_id)
        pathway_progress.transition_status(pathway, action, self.clock())
        logger.info("pathway status pathway=%s action=%s status=%s", pathway_id, action, pathway.status.value)
        return self.pathways.save(pathway)

    def update_recommendation_status(
        self, pathway_id: str, user_id: int, index: int, action: str
    ) -> AdaptiveRecommendation:
        pathway = self.get_pathway(pathway_id, user_id)
        rec = pathway_progress.set_recommendation_status(pathway, index, action)
        pathway.last_accessed_at = self.clock()
        self.pathways.save(pathway)
        return rec
