"""
Goal catalog endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from learnpath.config import get_db
from learnpath.schemas.goal_schemas import Goal, GoalWithScore
from learnpath.services.goal_matching import list_goals
from learnpath.routes.deps import get_goal_repository
from infra.db.sql_repositories import SqlGoalRepository, SqlProfileRepository
from learnpath.utils.auth import get_user_by_email
from learnpath.utils.jwt import verify_token

goal_routes = APIRouter()


def _optional_user_id(access_token: Optional[str], db: Session) -> Optional[int]:
    # Listing is public; a valid cookie only personalizes filters and scores.
    if not access_token:
        return None
    try:
        payload = verify_token(access_token)
    except HTTPException:
        return None
    user = get_user_by_email(payload.sub, db)
    return user.id if user else None


@goal_routes.get("", response_model=list[GoalWithScore])
def get_goals(
    category: Optional[str] = Query(None, description='Goal category, or "all"'),
    difficulty: Optional[str] = Query(None, description='Goal level, or "all"'),
    access_token: Optional[str] = Cookie(None),
    db: Session = Depends(get_db),
    goals: SqlGoalRepository = Depends(get_goal_repository),
) -> list[GoalWithScore]:
    user_id = _optional_user_id(access_token, db)
    profile = SqlProfileRepository(db).get(user_id) if user_id is not None else None
    return list_goals(goals, category=category, level=difficulty, profile=profile)


@goal_routes.get("/{goal_id}", response_model=Goal)
def get_goal(goal_id: str, goals: SqlGoalRepository = Depends(get_goal_repository)) -> Goal:
    goal = goals.get(goal_id)
    if goal is None:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal
