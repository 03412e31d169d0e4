"""
Learning analytics endpoints for the current user.
"""

from fastapi import APIRouter, Depends

from learnpath.schemas.insight_schemas import (
    AdaptiveSuggestion,
    LearningInsight,
    LearningPatterns,
    PerformancePrediction,
    SmartRecommendations,
)
from learnpath.schemas.user_schemas import User
from learnpath.services.learning_insights import LearningInsightsService
from learnpath.routes.deps import get_insights_service
from learnpath.utils.auth import get_current_user

insight_routes = APIRouter()


@insight_routes.get("/recommendations", response_model=SmartRecommendations)
def recommendations(
    current_user: User = Depends(get_current_user),
    service: LearningInsightsService = Depends(get_insights_service),
) -> SmartRecommendations:
    """Patterns, prediction, recommendations and insights in one payload."""
    return service.smart_recommendations(current_user.id)


@insight_routes.get("/learning-patterns", response_model=LearningPatterns)
def learning_patterns(
    current_user: User = Depends(get_current_user),
    service: LearningInsightsService = Depends(get_insights_service),
) -> LearningPatterns:
    return service.analyze_patterns(current_user.id)


@insight_routes.get("/performance-prediction", response_model=PerformancePrediction)
def performance_prediction(
    current_user: User = Depends(get_current_user),
    service: LearningInsightsService = Depends(get_insights_service),
) -> PerformancePrediction:
    return service.predict_performance(current_user.id)


@insight_routes.get("/learning-insights", response_model=list[LearningInsight])
def learning_insights(
    current_user: User = Depends(get_current_user),
    service: LearningInsightsService = Depends(get_insights_service),
) -> list[LearningInsight]:
    return service.learning_insights(current_user.id)


@insight_routes.get("/adaptive-recommendations", response_model=list[AdaptiveSuggestion])
def adaptive_recommendations(
    current_user: User = Depends(get_current_user),
    service: LearningInsightsService = Depends(get_insights_service),
) -> list[AdaptiveSuggestion]:
    return service.adaptive_recommendations(current_user.id)
