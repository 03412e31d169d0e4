from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session as DBSession
from sqlalchemy.orm.exc import StaleDataError

from learnpath.models import models
from learnpath.schemas.goal_schemas import Goal
from learnpath.schemas.pathway_schemas import Pathway, PathwayStatus, QuizAttempt
from learnpath.schemas.profile_schemas import AssessmentRecord, LearnerProfile, Preferences
from learnpath.services.errors import ConflictError, NotFoundError
from learnpath.services.repositories import (
    GoalRepository,
    PathwayRepository,
    ProfileRepository,
    QuizAttemptRepository,
)
from learnpath.utils.common import utcnow
from learnpath.utils.logger import configure_logging

logger = configure_logging()


def _dump(items) -> list:
    return [i.model_dump(mode="json") for i in items]


# ----- row <-> schema -----

def _profile_from_row(row: models.LearnerProfile) -> LearnerProfile:
    return LearnerProfile(
        user_id=row.user_id,
        learning_style=row.learning_style,
        preferences=Preferences(
            math_level=row.math_level,
            programming_level=row.programming_level,
            preferred_domain=row.preferred_domain,
        ),
        assessments=[
            AssessmentRecord(
                category=a.category,
                score=a.score,
                responses=a.responses or [],
                recommendations=a.recommendations or [],
                completed_at=a.completed_at,
            )
            for a in row.assessments
        ],
        goal_id=row.goal_id,
    )


def _goal_from_row(row: models.Goal) -> Goal:
    return Goal(
        id=row.id,
        title=row.title,
        description=row.description,
        category=row.category,
        level=row.level,
        estimated_duration=row.estimated_duration,
        prerequisites=row.prerequisites or [],
        modules=row.modules or [],
    )


def _pathway_from_row(row: models.Pathway) -> Pathway:
    return Pathway(
        id=row.id,
        user_id=row.user_id,
        goal_id=row.goal_id,
        status=row.status,
        progress=row.progress,
        current_module=row.current_module,
        module_progress=row.module_progress or [],
        started_at=row.started_at,
        last_accessed_at=row.last_accessed_at,
        estimated_completion_date=row.estimated_completion_date,
        completed_at=row.completed_at,
        adaptive_recommendations=row.adaptive_recommendations or [],
        next_goals=row.next_goals or [],
        version=row.version,
    )


def _attempt_from_row(row: models.QuizAttempt) -> QuizAttempt:
    return QuizAttempt(
        id=row.id,
        user_id=row.user_id,
        pathway_id=row.pathway_id,
        module_index=row.module_index,
        score=row.score,
        responses=row.responses or [],
        total_time_spent=row.total_time_spent,
        completed_at=row.completed_at,
    )


# ----- repositories -----

@dataclass
class SqlProfileRepository(ProfileRepository):
    db: DBSession

    def _row(self, user_id: int) -> Optional[models.LearnerProfile]:
        return self.db.query(models.LearnerProfile).filter(models.LearnerProfile.user_id == user_id).first()

    def _require(self, user_id: int) -> models.LearnerProfile:
        row = self._row(user_id)
        if row is None:
            raise NotFoundError(f"Learner profile for user {user_id} not found")
        return row

    def get(self, user_id: int) -> Optional[LearnerProfile]:
        row = self._row(user_id)
        return _profile_from_row(row) if row else None

    def get_or_create(self, user_id: int) -> LearnerProfile:
        row = self._row(user_id)
        if row is None:
            row = models.LearnerProfile(
                user_id=user_id,
                learning_style="visual",
                math_level="beginner",
                programming_level="beginner",
                preferred_domain="ml",
            )
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.info("learner profile created user_id=%s", user_id)
        return _profile_from_row(row)

    def upsert_preferences(self, user_id: int, learning_style: str, preferences: Preferences) -> LearnerProfile:
        row = self._row(user_id)
        if row is None:
            row = models.LearnerProfile(user_id=user_id)
            self.db.add(row)
        row.learning_style = learning_style
        row.math_level = preferences.math_level
        row.programming_level = preferences.programming_level
        row.preferred_domain = preferences.preferred_domain
        self.db.commit()
        self.db.refresh(row)
        return _profile_from_row(row)

    def append_assessment(self, user_id: int, record: AssessmentRecord) -> LearnerProfile:
        row = self._require(user_id)
        row.assessments.append(
            models.Assessment(
                category=record.category,
                score=record.score,
                responses=_dump(record.responses),
                recommendations=_dump(record.recommendations),
                completed_at=record.completed_at,
            )
        )
        self.db.commit()
        self.db.refresh(row)
        return _profile_from_row(row)

    def set_goal(self, user_id: int, goal_id: Optional[str]) -> LearnerProfile:
        row = self._require(user_id)
        row.goal_id = goal_id
        self.db.commit()
        self.db.refresh(row)
        return _profile_from_row(row)


@dataclass
class SqlGoalRepository(GoalRepository):
    db: DBSession

    def get(self, goal_id: str) -> Optional[Goal]:
        row = self.db.get(models.Goal, goal_id)
        return _goal_from_row(row) if row else None

    def find(
        self,
        category: Optional[str] = None,
        level: Optional[str] = None,
        exclude_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Goal]:
        query = self.db.query(models.Goal)
        if category:
            query = query.filter(models.Goal.category == category)
        if level:
            query = query.filter(models.Goal.level == level)
        if exclude_id:
            query = query.filter(models.Goal.id != exclude_id)
        query = query.order_by(models.Goal.category, models.Goal.level, models.Goal.created_at)
        if limit:
            query = query.limit(limit)
        return [_goal_from_row(r) for r in query.all()]

    def add(self, goal: Goal) -> Goal:
        row = models.Goal(
            id=goal.id or str(uuid4()),
            title=goal.title,
            description=goal.description,
            category=goal.category,
            level=goal.level,
            estimated_duration=goal.estimated_duration,
            prerequisites=_dump(goal.prerequisites),
            modules=_dump(goal.modules),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _goal_from_row(row)


@dataclass
class SqlPathwayRepository(PathwayRepository):
    """
    Pathways table access.

    `version` is the mapper's version_id_col: every UPDATE is guarded by the version
    the caller read, so a lost update surfaces as StaleDataError -> ConflictError.
    """

    db: DBSession

    def get(self, pathway_id: str, user_id: Optional[int] = None) -> Optional[Pathway]:
        query = self.db.query(models.Pathway).filter(models.Pathway.id == pathway_id)
        if user_id is not None:
            query = query.filter(models.Pathway.user_id == user_id)
        row = query.first()
        return _pathway_from_row(row) if row else None

    def find_active(self, user_id: int, goal_id: str) -> Optional[Pathway]:
        row = (
            self.db.query(models.Pathway)
            .filter(
                models.Pathway.user_id == user_id,
                models.Pathway.goal_id == goal_id,
                models.Pathway.status != PathwayStatus.COMPLETED,
            )
            .first()
        )
        return _pathway_from_row(row) if row else None

    def list_for_user(self, user_id: int, statuses: Optional[Iterable[PathwayStatus]] = None) -> List[Pathway]:
        query = self.db.query(models.Pathway).filter(models.Pathway.user_id == user_id)
        if statuses is not None:
            query = query.filter(models.Pathway.status.in_(list(statuses)))
        rows = query.order_by(models.Pathway.last_accessed_at.desc()).all()
        return [_pathway_from_row(r) for r in rows]

    def create(self, pathway: Pathway) -> Pathway:
        row = models.Pathway(id=pathway.id or str(uuid4()), user_id=pathway.user_id, goal_id=pathway.goal_id)
        self._apply(row, pathway)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("pathway insert conflict user_id=%s goal=%s", pathway.user_id, pathway.goal_id)
            raise ConflictError(f"An active pathway already exists for goal {pathway.goal_id}") from e
        self.db.refresh(row)
        return _pathway_from_row(row)

    def save(self, pathway: Pathway) -> Pathway:
        row = self.db.get(models.Pathway, pathway.id)
        if row is None:
            raise NotFoundError(f"Pathway {pathway.id} not found")
        if row.version != pathway.version:
            raise ConflictError(f"Pathway {pathway.id} was modified concurrently")
        self._apply(row, pathway)
        try:
            self.db.commit()
        except (StaleDataError, IntegrityError) as e:
            self.db.rollback()
            logger.warning("pathway save conflict id=%s version=%s", pathway.id, pathway.version)
            raise ConflictError(f"Pathway {pathway.id} was modified concurrently") from e
        self.db.refresh(row)
        return _pathway_from_row(row)

    @staticmethod
    def _apply(row: models.Pathway, pathway: Pathway) -> None:
        row.status = pathway.status
        row.progress = pathway.progress
        row.current_module = pathway.current_module
        row.module_progress = _dump(pathway.module_progress)
        row.adaptive_recommendations = _dump(pathway.adaptive_recommendations)
        row.next_goals = list(pathway.next_goals)
        row.started_at = pathway.started_at
        row.last_accessed_at = pathway.last_accessed_at
        row.estimated_completion_date = pathway.estimated_completion_date
        row.completed_at = pathway.completed_at


@dataclass
class SqlQuizAttemptRepository(QuizAttemptRepository):
    db: DBSession

    def _module_query(self, user_id: int, pathway_id: str, module_index: int):
        return self.db.query(models.QuizAttempt).filter(
            models.QuizAttempt.user_id == user_id,
            models.QuizAttempt.pathway_id == pathway_id,
            models.QuizAttempt.module_index == module_index,
        )

    def record(self, attempt: QuizAttempt) -> QuizAttempt:
        row = models.QuizAttempt(
            id=attempt.id or str(uuid4()),
            user_id=attempt.user_id,
            pathway_id=attempt.pathway_id,
            module_index=attempt.module_index,
            score=attempt.score,
            responses=_dump(attempt.responses),
            total_time_spent=attempt.total_time_spent,
            completed_at=attempt.completed_at or utcnow(),
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return _attempt_from_row(row)

    def list_for_module(self, user_id: int, pathway_id: str, module_index: int) -> List[QuizAttempt]:
        rows = self._module_query(user_id, pathway_id, module_index).order_by(models.QuizAttempt.completed_at.desc()).all()
        return [_attempt_from_row(r) for r in rows]

    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> List[QuizAttempt]:
        query = (
            self.db.query(models.QuizAttempt)
            .filter(models.QuizAttempt.user_id == user_id)
            .order_by(models.QuizAttempt.completed_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return [_attempt_from_row(r) for r in query.all()]

    def delete_for_module(self, user_id: int, pathway_id: str, module_index: int) -> int:
        deleted = self._module_query(user_id, pathway_id, module_index).delete(synchronize_session=False)
        self.db.commit()
        return deleted
