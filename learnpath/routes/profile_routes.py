"""
Learner profile endpoints: preferences, goal and assessment history.
"""

from fastapi import APIRouter, Depends

from learnpath.schemas.assessment_schemas import AssessmentSubmitRequest, AssessmentSubmitResponse
from learnpath.schemas.profile_schemas import AssessmentRecord, LearnerProfile, SetGoalRequest, UpdateProfileRequest
from learnpath.schemas.user_schemas import User
from learnpath.services.profile_service import ProfileService
from learnpath.routes.deps import get_profile_service
from learnpath.utils.auth import get_current_user

profile_routes = APIRouter()


@profile_routes.get("", response_model=LearnerProfile)
def get_profile(
    current_user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> LearnerProfile:
    """Current learner's profile, created with defaults on first access."""
    return service.get_profile(current_user.id)


@profile_routes.put("", response_model=LearnerProfile)
def update_profile(
    body: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> LearnerProfile:
    return service.update_preferences(current_user.id, body.learning_style, body.preferences)


@profile_routes.post("/assessments", response_model=AssessmentSubmitResponse)
def add_assessment(
    body: AssessmentSubmitRequest,
    current_user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> AssessmentSubmitResponse:
    return service.submit_assessment(current_user.id, body.category, body.responses)


@profile_routes.get("/assessments", response_model=list[AssessmentRecord])
def assessment_history(
    current_user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> list[AssessmentRecord]:
    return service.assessment_history(current_user.id)


@profile_routes.put("/goal", response_model=LearnerProfile)
def set_goal(
    body: SetGoalRequest,
    current_user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> LearnerProfile:
    return service.set_goal(current_user.id, body.goal_id)
