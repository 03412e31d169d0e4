"""
Data models. Single import surface for DB entities.

DB entities (learnpath.models.models):
- User, LearnerProfile, Assessment, Goal, Pathway, QuizAttempt
"""

from learnpath.models.models import (
    User,
    LearnerProfile,
    Assessment,
    Goal,
    Pathway,
    QuizAttempt,
)

__all__ = [
    "User",
    "LearnerProfile",
    "Assessment",
    "Goal",
    "Pathway",
    "QuizAttempt",
]
