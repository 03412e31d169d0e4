from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from learnpath.schemas.goal_schemas import Goal
from learnpath.schemas.pathway_schemas import Pathway, PathwayStatus, QuizAttempt
from learnpath.schemas.profile_schemas import AssessmentRecord, LearnerProfile, Preferences


class ProfileRepository(ABC):
    """
    Learner profile contract.

    The pathway core only reads profiles; writes come from the profile service.
    Infrastructure (e.g. SQL) implements it in `infra.db`.
    """

    @abstractmethod
    def get(self, user_id: int) -> Optional[LearnerProfile]:
        raise NotImplementedError

    @abstractmethod
    def get_or_create(self, user_id: int) -> LearnerProfile:
        """Return the profile, creating it with default preferences if absent."""

        raise NotImplementedError

    @abstractmethod
    def upsert_preferences(self, user_id: int, learning_style: str, preferences: Preferences) -> LearnerProfile:
        raise NotImplementedError

    @abstractmethod
    def append_assessment(self, user_id: int, record: AssessmentRecord) -> LearnerProfile:
        """Append to the assessment history. Existing records are never modified."""

        raise NotImplementedError

    @abstractmethod
    def set_goal(self, user_id: int, goal_id: Optional[str]) -> LearnerProfile:
        raise NotImplementedError


class GoalRepository(ABC):
    @abstractmethod
    def get(self, goal_id: str) -> Optional[Goal]:
        raise NotImplementedError

    @abstractmethod
    def find(
        self,
        category: Optional[str] = None,
        level: Optional[str] = None,
        exclude_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Goal]:
        raise NotImplementedError

    @abstractmethod
    def add(self, goal: Goal) -> Goal:
        raise NotImplementedError


class PathwayRepository(ABC):
    """
    Pathway persistence contract.

    Implementations enforce at most one non-completed pathway per (user, goal) and
    serialize writers on one pathway; both surface as `ConflictError`.
    """

    @abstractmethod
    def get(self, pathway_id: str, user_id: Optional[int] = None) -> Optional[Pathway]:
        """Fetch by id; when `user_id` is given, only that user's pathway matches."""

        raise NotImplementedError

    @abstractmethod
    def find_active(self, user_id: int, goal_id: str) -> Optional[Pathway]:
        """Non-completed (active or paused) pathway for the pair, if any."""

        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: int, statuses: Optional[Iterable[PathwayStatus]] = None) -> List[Pathway]:
        raise NotImplementedError

    @abstractmethod
    def create(self, pathway: Pathway) -> Pathway:
        """Insert and return the stored pathway with its id and version assigned."""

        raise NotImplementedError

    @abstractmethod
    def save(self, pathway: Pathway) -> Pathway:
        """
        Full replace of the mutable fields.

        Raises ConflictError when `pathway.version` no longer matches the stored row.
        """

        raise NotImplementedError


class QuizAttemptRepository(ABC):
    @abstractmethod
    def record(self, attempt: QuizAttempt) -> QuizAttempt:
        raise NotImplementedError

    @abstractmethod
    def list_for_module(self, user_id: int, pathway_id: str, module_index: int) -> List[QuizAttempt]:
        """Attempts for one module quiz, most recent first."""

        raise NotImplementedError

    @abstractmethod
    def list_for_user(self, user_id: int, limit: Optional[int] = None) -> List[QuizAttempt]:
        """All of a user's attempts across pathways, most recent first."""

        raise NotImplementedError

    @abstractmethod
    def delete_for_module(self, user_id: int, pathway_id: str, module_index: int) -> int:
        raise NotImplementedError
