"""
SQL (SQLAlchemy) implementations of the repository contracts in
`learnpath.services.repositories`.
"""

from infra.db.sql_repositories import (
    SqlGoalRepository,
    SqlPathwayRepository,
    SqlProfileRepository,
    SqlQuizAttemptRepository,
)

__all__ = [
    "SqlGoalRepository",
    "SqlPathwayRepository",
    "SqlProfileRepository",
    "SqlQuizAttemptRepository",
]
