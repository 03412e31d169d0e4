"""
Learning analytics schemas: activity patterns, performance prediction and the
recommendations/insights derived from them.
"""

from typing import Literal

from pydantic import BaseModel, Field

from learnpath.schemas.pathway_schemas import Priority

LoadAdjustment = Literal["increase", "decrease", "maintain"]


class TimePatterns(BaseModel):
    preferred_hours: list[int] = Field(default_factory=list)  # UTC hours, most active first
    session_duration: float = 0.0  # minutes per quiz session
    frequency: float = 0.0  # quiz sessions per week


class LoadTrend(BaseModel):
    optimal: float
    current: float
    recommendation: LoadAdjustment = "maintain"


class LearningPatterns(BaseModel):
    learning_velocity: float = 0.0  # progress points per day
    consistency_score: float = 0.0
    topic_affinities: dict[str, float] = Field(default_factory=dict)
    strengths: list[str] = Field(default_factory=list)
    struggling_areas: list[str] = Field(default_factory=list)
    time_patterns: TimePatterns = Field(default_factory=TimePatterns)
    cognitive_load: LoadTrend
    retention_rate: float = 0.7
    engagement_level: float = 0.5
    recent_performance: float = 0.7
    learning_style: str = "visual"
    preferred_domain: str = "ml"


class PerformancePrediction(BaseModel):
    success_probability: float = 0.0  # 0..1
    recommended_difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    risk_factors: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)


class InsightRecommendation(BaseModel):
    type: Literal["learning_pace", "consistency", "strength_based", "improvement"]
    title: str
    description: str
    priority: Priority
    actions: list[str] = Field(default_factory=list)
    estimated_impact: str = ""
    reasoning: str = ""
    suggested_goals: list[str] = Field(default_factory=list)  # goal titles


class AdaptiveSuggestion(BaseModel):
    type: Literal["immediate_support", "acceleration"]
    title: str
    description: str
    urgency: Priority
    suggestions: list[str] = Field(default_factory=list)


class LearningInsight(BaseModel):
    type: Literal["learning_style", "progression", "retention", "engagement"]
    title: str
    description: str
    recommendation: str


class SmartRecommendations(BaseModel):
    recommendations: list[InsightRecommendation]
    adaptive_recommendations: list[AdaptiveSuggestion]
    learning_patterns: LearningPatterns
    performance_prediction: PerformancePrediction
    insights: list[LearningInsight]
