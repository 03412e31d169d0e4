"""
FastAPI dependencies wiring services to the SQL repositories of the request's DB session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from infra.db.sql_repositories import (
    SqlGoalRepository,
    SqlPathwayRepository,
    SqlProfileRepository,
    SqlQuizAttemptRepository,
)
from learnpath.config import get_db
from learnpath.services.learning_insights import LearningInsightsService
from learnpath.services.pathway_service import PathwayService
from learnpath.services.profile_service import ProfileService
from learnpath.services.question_bank import QuestionBank, get_question_bank


def get_goal_repository(db: Session = Depends(get_db)) -> SqlGoalRepository:
    return SqlGoalRepository(db)


def get_profile_repository(db: Session = Depends(get_db)) -> SqlProfileRepository:
    return SqlProfileRepository(db)


def get_pathway_repository(db: Session = Depends(get_db)) -> SqlPathwayRepository:
    return SqlPathwayRepository(db)


def get_profile_service(
    db: Session = Depends(get_db),
    question_bank: QuestionBank = Depends(get_question_bank),
) -> ProfileService:
    return ProfileService(SqlProfileRepository(db), SqlGoalRepository(db), question_bank=question_bank)


def get_pathway_service(
    db: Session = Depends(get_db),
    question_bank: QuestionBank = Depends(get_question_bank),
) -> PathwayService:
    return PathwayService(
        profiles=SqlProfileRepository(db),
        goals=SqlGoalRepository(db),
        pathways=SqlPathwayRepository(db),
        attempts=SqlQuizAttemptRepository(db),
        question_bank=question_bank,
    )


def get_insights_service(db: Session = Depends(get_db)) -> LearningInsightsService:
    return LearningInsightsService(
        profiles=SqlProfileRepository(db),
        goals=SqlGoalRepository(db),
        pathways=SqlPathwayRepository(db),
        attempts=SqlQuizAttemptRepository(db),
    )
