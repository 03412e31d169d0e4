"""
Pathway endpoints: generation, progress events, quizzes, status and dashboard.
"""

from fastapi import APIRouter, Depends, status

from learnpath.schemas.assessment_schemas import QuizSubmitRequest
from learnpath.schemas.pathway_schemas import (
    AdaptiveRecommendation,
    DashboardResponse,
    GeneratePathwayRequest,
    Pathway,
    QuizAttempt,
    QuizSubmitResponse,
    RecommendationActionRequest,
    ResourceProgressRequest,
    StatusActionRequest,
)
from learnpath.schemas.user_schemas import User
from learnpath.services.dashboard import build_dashboard
from learnpath.services.pathway_service import PathwayService
from learnpath.services.question_bank import QUESTION_CONFIGS, to_public
from learnpath.routes.deps import get_pathway_service
from learnpath.utils.auth import get_current_user

pathway_routes = APIRouter()


@pathway_routes.post("/generate", response_model=Pathway, status_code=status.HTTP_201_CREATED)
def generate_pathway(
    body: GeneratePathwayRequest,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> Pathway:
    """Generate and store an adapted pathway. 409 if one is already open for the goal."""
    return service.start_pathway(current_user.id, body.goal_id)


@pathway_routes.get("/user/dashboard", response_model=DashboardResponse)
def dashboard(
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> DashboardResponse:
    return build_dashboard(current_user.id, service.pathways, service.goals, now=service.clock())


@pathway_routes.get("/{pathway_id}", response_model=Pathway)
def get_pathway(
    pathway_id: str,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> Pathway:
    return service.get_pathway(pathway_id, current_user.id)


@pathway_routes.put("/{pathway_id}/modules/{module_index}", response_model=Pathway)
def update_module_resource(
    pathway_id: str,
    module_index: int,
    body: ResourceProgressRequest,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> Pathway:
    return service.complete_resource(pathway_id, current_user.id, module_index, body.resource_id, body.completed)


@pathway_routes.get("/{pathway_id}/modules/{module_index}/quiz")
def get_module_quiz(
    pathway_id: str,
    module_index: int,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> dict:
    questions = service.module_quiz(pathway_id, current_user.id, module_index)
    config = QUESTION_CONFIGS["quiz"]
    return {
        "module_index": module_index,
        "time_limit": config["time_limit"],
        "passing_score": config["passing_score"],
        "questions": [to_public(q).model_dump() for q in questions],
    }


@pathway_routes.post("/{pathway_id}/modules/{module_index}/quiz/submit", response_model=QuizSubmitResponse)
def submit_module_quiz(
    pathway_id: str,
    module_index: int,
    body: QuizSubmitRequest,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> QuizSubmitResponse:
    attempt, pathway = service.submit_quiz(pathway_id, current_user.id, module_index, body.responses)
    return QuizSubmitResponse(attempt=attempt, pathway=pathway)


@pathway_routes.post("/{pathway_id}/modules/{module_index}/quiz/reset", response_model=Pathway)
def reset_module_quiz(
    pathway_id: str,
    module_index: int,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> Pathway:
    return service.reset_quiz(pathway_id, current_user.id, module_index)


@pathway_routes.get("/{pathway_id}/modules/{module_index}/quiz/attempts", response_model=list[QuizAttempt])
def list_module_quiz_attempts(
    pathway_id: str,
    module_index: int,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> list[QuizAttempt]:
    return service.list_quiz_attempts(pathway_id, current_user.id, module_index)


@pathway_routes.put("/{pathway_id}/recommendations/{index}", response_model=AdaptiveRecommendation)
def update_recommendation(
    pathway_id: str,
    index: int,
    body: RecommendationActionRequest,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> AdaptiveRecommendation:
    return service.update_recommendation_status(pathway_id, current_user.id, index, body.action)


@pathway_routes.post("/{pathway_id}/recommendations/refresh", response_model=Pathway)
def refresh_recommendations(
    pathway_id: str,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> Pathway:
    return service.generate_recommendations(pathway_id, current_user.id)


@pathway_routes.post("/{pathway_id}/status", response_model=Pathway)
def change_status(
    pathway_id: str,
    body: StatusActionRequest,
    current_user: User = Depends(get_current_user),
    service: PathwayService = Depends(get_pathway_service),
) -> Pathway:
    return service.set_status(pathway_id, current_user.id, body.action)
