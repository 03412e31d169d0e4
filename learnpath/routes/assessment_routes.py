"""
Assessment question and submission endpoints. Answers are scored server-side.
"""

import random
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from learnpath.schemas.assessment_schemas import AssessmentSubmitRequest, AssessmentSubmitResponse
from learnpath.schemas.user_schemas import User
from learnpath.services.profile_service import ProfileService
from learnpath.services.question_bank import QUESTION_CONFIGS, QuestionBank, get_question_bank, to_public
from learnpath.routes.deps import get_profile_service
from learnpath.utils.auth import get_current_user

assessment_routes = APIRouter()


@assessment_routes.get("/questions")
def get_questions(
    domain: Optional[str] = Query(None, description="Question bank category; all categories when omitted"),
    current_user: User = Depends(get_current_user),
    question_bank: QuestionBank = Depends(get_question_bank),
) -> dict:
    if domain is not None and domain not in question_bank.categories():
        raise HTTPException(status_code=404, detail=f"Unknown domain {domain}")
    categories = [domain] if domain else None
    questions = question_bank.assessment_questions(categories, rng=random.Random())
    config = QUESTION_CONFIGS["assessment"]
    return {
        "questions": [to_public(q).model_dump() for q in questions],
        "time_per_question": config["time_per_question"],
        "passing_score": config["passing_score"],
    }


@assessment_routes.post("/submit", response_model=AssessmentSubmitResponse)
def submit_assessment(
    body: AssessmentSubmitRequest,
    current_user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> AssessmentSubmitResponse:
    return service.submit_assessment(current_user.id, body.category, body.responses)
