"""
Learning analytics over a learner's pathways and quiz history.

`analyze_patterns` reduces pathways and recent quiz attempts to LearningPatterns
(velocity, regularity, per-topic performance, activity timing, retention,
engagement). Prediction, recommendations and insights are rule tables over those
patterns. A quiz attempt's topic is the category of its pathway's goal.
"""

from __future__ import annotations

import statistics
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from learnpath.schemas.insight_schemas import (
    AdaptiveSuggestion,
    InsightRecommendation,
    LearningInsight,
    LearningPatterns,
    LoadTrend,
    PerformancePrediction,
    SmartRecommendations,
    TimePatterns,
)
from learnpath.schemas.pathway_schemas import Pathway, QuizAttempt
from learnpath.schemas.profile_schemas import LearnerProfile
from learnpath.services.repositories import (
    GoalRepository,
    PathwayRepository,
    ProfileRepository,
    QuizAttemptRepository,
)
from learnpath.utils.common import utcnow
from learnpath.utils.logger import configure_logging

logger = configure_logging()

ATTEMPT_WINDOW = 20
RECENT_QUIZZES = 3
RETENTION_SPAN = 5
ENGAGEMENT_WINDOW = timedelta(days=7)
OPTIMAL_LOAD = 0.3
LOAD_TOLERANCE = 0.1
STRENGTH_SCORE = 80
WEAKNESS_SCORE = 60
DEFAULT_RETENTION = 0.7
DEFAULT_PERFORMANCE = 0.7
DEFAULT_ENGAGEMENT = 0.5
MAX_SUGGESTED_GOALS = 3


# ----- patterns -----

def learning_velocity(pathways: Sequence[Pathway]) -> float:
    """Average pathway progress per day of activity (first start to last access)."""
    if not pathways:
        return 0.0
    avg_progress = sum(p.progress for p in pathways) / len(pathways)
    days = sum((p.last_accessed_at - p.started_at).total_seconds() for p in pathways) / 86400
    return avg_progress / days if days > 0 else 0.0


def consistency_score(pathways: Sequence[Pathway]) -> float:
    """1 / (1 + coefficient of variation) of the gaps between pathway accesses."""
    if not pathways:
        return 0.0
    accesses = sorted(p.last_accessed_at for p in pathways)
    if len(accesses) < 2:
        return 0.5
    gaps = [(b - a).total_seconds() for a, b in zip(accesses, accesses[1:])]
    mean = statistics.fmean(gaps)
    if mean == 0:
        return 1.0
    return min(1.0, max(0.0, 1 / (1 + statistics.pstdev(gaps) / mean)))


def _scores_by_topic(attempts: Sequence[QuizAttempt], topic_of: Callable[[QuizAttempt], Optional[str]]) -> Dict[str, List[float]]:
    scores: Dict[str, List[float]] = defaultdict(list)
    for attempt in attempts:
        topic = topic_of(attempt)
        if topic is not None:
            scores[topic].append(attempt.score)
    return scores


def topic_affinities(attempts, topic_of) -> Dict[str, float]:
    """Mean quiz score per topic, as a 0..1 fraction."""
    return {
        topic: round(statistics.fmean(scores) / 100, 2)
        for topic, scores in _scores_by_topic(attempts, topic_of).items()
    }


def strengths_and_weaknesses(attempts, topic_of) -> tuple[list[str], list[str]]:
    strengths, weaknesses = [], []
    for topic, scores in _scores_by_topic(attempts, topic_of).items():
        average = statistics.fmean(scores)
        if average > STRENGTH_SCORE:
            strengths.append(topic)
        elif average < WEAKNESS_SCORE:
            weaknesses.append(topic)
    return strengths, weaknesses


def time_patterns(pathways: Sequence[Pathway], attempts: Sequence[QuizAttempt], now: datetime) -> TimePatterns:
    """
    Activity timing from recorded timestamps.

    preferred_hours: the three hours of day with the most resource completions and
    quiz attempts (ties broken by earlier hour). session_duration: mean time spent
    per quiz attempt, in minutes. frequency: quiz attempts during the last week.
    """
    hours = Counter(a.completed_at.hour for a in attempts)
    for pathway in pathways:
        for module in pathway.module_progress:
            hours.update(r.completed_at.hour for r in module.resources if r.completed_at)
    ranked = sorted(hours.items(), key=lambda item: (-item[1], item[0]))

    duration = statistics.fmean(a.total_time_spent for a in attempts) / 60 if attempts else 0.0
    week_ago = now - ENGAGEMENT_WINDOW
    return TimePatterns(
        preferred_hours=[hour for hour, _ in ranked[:3]],
        session_duration=round(duration, 2),
        frequency=float(sum(1 for a in attempts if a.completed_at > week_ago)),
    )


def recent_performance(attempts: Sequence[QuizAttempt]) -> float:
    """Mean of the latest quiz scores as a fraction; attempts are most recent first."""
    if not attempts:
        return DEFAULT_PERFORMANCE
    return round(statistics.fmean(a.score for a in attempts[:RECENT_QUIZZES]) / 100, 2)


def cognitive_load_trend(performance: float) -> LoadTrend:
    # Load is read as the share of quiz material the learner is missing.
    current = round(1 - performance, 2)
    recommendation = "maintain"
    if current < OPTIMAL_LOAD - LOAD_TOLERANCE:
        recommendation = "increase"
    elif current > OPTIMAL_LOAD + LOAD_TOLERANCE:
        recommendation = "decrease"
    return LoadTrend(optimal=OPTIMAL_LOAD, current=current, recommendation=recommendation)


def retention_rate(attempts: Sequence[QuizAttempt]) -> float:
    """Recent scores relative to the preceding ones, capped at 1."""
    if not attempts:
        return DEFAULT_RETENTION
    recent = statistics.fmean(a.score for a in attempts[:RETENTION_SPAN])
    older = [a.score for a in attempts[RETENTION_SPAN:RETENTION_SPAN * 2]]
    if not older:
        return round(recent / 100, 2)
    older_avg = statistics.fmean(older)
    if older_avg == 0:
        return 1.0 if recent > 0 else 0.0
    return round(min(1.0, recent / older_avg), 2)


def engagement_level(pathways: Sequence[Pathway], now: datetime) -> float:
    """Share of pathways accessed during the last week."""
    if not pathways:
        return DEFAULT_ENGAGEMENT
    recent = sum(1 for p in pathways if p.last_accessed_at > now - ENGAGEMENT_WINDOW)
    return round(recent / len(pathways), 2)


def analyze_patterns(
    profile: Optional[LearnerProfile],
    pathways: Sequence[Pathway],
    attempts: Sequence[QuizAttempt],
    topic_of: Callable[[QuizAttempt], Optional[str]],
    now: datetime,
) -> LearningPatterns:
    strengths, weaknesses = strengths_and_weaknesses(attempts, topic_of)
    performance = recent_performance(attempts)
    return LearningPatterns(
        learning_velocity=round(learning_velocity(pathways), 2),
        consistency_score=round(consistency_score(pathways), 2),
        topic_affinities=topic_affinities(attempts, topic_of),
        strengths=strengths,
        struggling_areas=weaknesses,
        time_patterns=time_patterns(pathways, attempts, now),
        cognitive_load=cognitive_load_trend(performance),
        retention_rate=retention_rate(attempts),
        engagement_level=engagement_level(pathways, now),
        recent_performance=performance,
        learning_style=profile.learning_style if profile else "visual",
        preferred_domain=profile.preferences.preferred_domain if profile else "ml",
    )


# ----- prediction and advice -----

def predict_performance(patterns: LearningPatterns) -> PerformancePrediction:
    """
    Success probability from weighted factors: velocity 30, consistency 25,
    engagement 25, retention 20 (points out of 100).
    """
    score = 0.0
    if patterns.learning_velocity > 0.8:
        score += 30
    elif patterns.learning_velocity > 0.5:
        score += 20
    elif patterns.learning_velocity > 0.2:
        score += 10
    score += patterns.consistency_score * 25
    score += patterns.engagement_level * 25
    score += patterns.retention_rate * 20

    risks = []
    if patterns.learning_velocity < 0.3:
        risks.append("Slow learning velocity")
    if patterns.consistency_score < 0.5:
        risks.append("Irregular study rhythm")
    if patterns.retention_rate < 0.6:
        risks.append("Retention difficulties")
    if patterns.engagement_level < 0.4:
        risks.append("Low engagement")

    opportunities = []
    if len(patterns.strengths) > len(patterns.struggling_areas):
        opportunities.append("Build on strengths to speed up learning")
    if patterns.cognitive_load.current < patterns.cognitive_load.optimal:
        opportunities.append("Raise the difficulty to use spare capacity")

    affinities = list(patterns.topic_affinities.values())
    average = statistics.fmean(affinities) if affinities else 0.0
    if average > 0.8:
        difficulty = "advanced"
    elif average > 0.6:
        difficulty = "intermediate"
    else:
        difficulty = "beginner"

    return PerformancePrediction(
        success_probability=round(min(100.0, score) / 100, 2),
        recommended_difficulty=difficulty,
        risk_factors=risks,
        opportunities=opportunities,
    )


def basic_recommendations(
    patterns: LearningPatterns,
    advanced_goals: Sequence[str] = (),
    foundational_goals: Sequence[str] = (),
) -> List[InsightRecommendation]:
    recommendations = []
    if patterns.learning_velocity < 0.3:
        recommendations.append(
            InsightRecommendation(
                type="learning_pace",
                title="Optimise your learning pace",
                description="Your pace could improve. Try shorter but more frequent sessions.",
                priority="high",
                actions=[
                    "Plan 25-30 minute sessions",
                    "Use the Pomodoro technique",
                    "Set achievable daily objectives",
                ],
                estimated_impact="Better retention",
                reasoning="Current learning velocity is low",
            )
        )
    if patterns.consistency_score < 0.5:
        recommendations.append(
            InsightRecommendation(
                type="consistency",
                title="Study more regularly",
                description="A steadier practice rhythm will help you progress faster.",
                priority="high",
                actions=[
                    "Set a fixed study schedule",
                    "Use daily reminders",
                    "Start with 15 minutes a day",
                ],
                estimated_impact="Faster progression",
                reasoning="Study sessions are irregular",
            )
        )
    if patterns.strengths:
        recommendations.append(
            InsightRecommendation(
                type="strength_based",
                title="Build on your strengths",
                description=f"You excel in {' and '.join(patterns.strengths[:2])}. Use these skills as leverage.",
                priority="medium",
                actions=[
                    "Explore advanced topics in your strong areas",
                    "Mentor other learners",
                    "Join collaborative projects",
                ],
                estimated_impact="More confidence and motivation",
                reasoning="Strong topics identified",
                suggested_goals=list(advanced_goals),
            )
        )
    if patterns.struggling_areas:
        recommendations.append(
            InsightRecommendation(
                type="improvement",
                title="Strengthen the foundations",
                description=f"Focus on {' and '.join(patterns.struggling_areas[:2])} to consolidate your basics.",
                priority="high",
                actions=[
                    "Review the fundamental concepts",
                    "Practise with simple exercises",
                    "Ask for help on the forum",
                ],
                estimated_impact="Fewer knowledge gaps",
                reasoning="Weak topics need reinforcement",
                suggested_goals=list(foundational_goals),
            )
        )
    return recommendations


def adaptive_recommendations(patterns: LearningPatterns, prediction: PerformancePrediction) -> List[AdaptiveSuggestion]:
    suggestions = []
    if patterns.recent_performance < 0.6:
        suggestions.append(
            AdaptiveSuggestion(
                type="immediate_support",
                title="Extra support recommended",
                description="Your recent quiz results suggest you need some additional help.",
                urgency="high",
                suggestions=[
                    "Take a 1-2 day break",
                    "Review the basic concepts",
                    "Ask for help on the forums",
                ],
            )
        )
    if patterns.learning_velocity > 0.8 and prediction.success_probability > 0.8:
        suggestions.append(
            AdaptiveSuggestion(
                type="acceleration",
                title="Ready to speed up",
                description="Your results allow a faster pace.",
                urgency="medium",
                suggestions=[
                    "Move on to advanced modules",
                    "Take on extra challenges",
                    "Mentor other learners",
                ],
            )
        )
    return suggestions


def learning_insights(patterns: LearningPatterns) -> List[LearningInsight]:
    insights = []
    duration = patterns.time_patterns.session_duration
    if duration > 60:
        insights.append(
            LearningInsight(
                type="learning_style",
                title="Marathon learner",
                description="You prefer long, in-depth sessions.",
                recommendation="Keep 60-90 minute sessions with regular breaks.",
            )
        )
    elif 0 < duration < 30:
        insights.append(
            LearningInsight(
                type="learning_style",
                title="Sprint learner",
                description="You do well in short, intense sessions.",
                recommendation="Make the most of focused 20-25 minute sessions.",
            )
        )
    if patterns.learning_velocity > 0.7:
        insights.append(
            LearningInsight(
                type="progression",
                title="Fast progression",
                description="Your learning velocity is excellent.",
                recommendation="Keep this pace and consider harder challenges.",
            )
        )
    if patterns.retention_rate > 0.8:
        insights.append(
            LearningInsight(
                type="retention",
                title="Excellent retention",
                description="You retain what you learn very well.",
                recommendation="Your study method works, keep it up.",
            )
        )
    if patterns.engagement_level > 0.8:
        insights.append(
            LearningInsight(
                type="engagement",
                title="Outstanding engagement",
                description="Your engagement level is remarkable.",
                recommendation="Use this motivation for more ambitious goals.",
            )
        )
    return insights


class LearningInsightsService:
    """Loads a learner's history through the repositories and runs the analytics over it."""

    def __init__(
        self,
        profiles: ProfileRepository,
        goals: GoalRepository,
        pathways: PathwayRepository,
        attempts: QuizAttemptRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.profiles = profiles
        self.goals = goals
        self.pathways = pathways
        self.attempts = attempts
        self.clock = clock

    def analyze_patterns(self, user_id: int) -> LearningPatterns:
        pathways = self.pathways.list_for_user(user_id)
        attempts = self.attempts.list_for_user(user_id, limit=ATTEMPT_WINDOW)

        categories = {}
        for pathway in pathways:
            goal = self.goals.get(pathway.goal_id)
            if goal is not None:
                categories[pathway.id] = goal.category

        patterns = analyze_patterns(
            self.profiles.get(user_id),
            pathways,
            attempts,
            lambda attempt: categories.get(attempt.pathway_id),
            self.clock(),
        )
        logger.info(
            "learning patterns user_id=%s pathways=%d attempts=%d velocity=%s consistency=%s",
            user_id,
            len(pathways),
            len(attempts),
            patterns.learning_velocity,
            patterns.consistency_score,
        )
        return patterns

    def predict_performance(self, user_id: int) -> PerformancePrediction:
        return predict_performance(self.analyze_patterns(user_id))

    def learning_insights(self, user_id: int) -> List[LearningInsight]:
        return learning_insights(self.analyze_patterns(user_id))

    def adaptive_recommendations(self, user_id: int) -> List[AdaptiveSuggestion]:
        patterns = self.analyze_patterns(user_id)
        return adaptive_recommendations(patterns, predict_performance(patterns))

    def goal_titles(self, categories: Sequence[str], level: str) -> List[str]:
        titles: List[str] = []
        for category in categories:
            for goal in self.goals.find(category=category, level=level, limit=MAX_SUGGESTED_GOALS):
                titles.append(goal.title)
        return titles[:MAX_SUGGESTED_GOALS]

    def smart_recommendations(self, user_id: int) -> SmartRecommendations:
        patterns = self.analyze_patterns(user_id)
        prediction = predict_performance(patterns)
        return SmartRecommendations(
            recommendations=basic_recommendations(
                patterns,
                advanced_goals=self.goal_titles(patterns.strengths, "advanced"),
                foundational_goals=self.goal_titles(patterns.struggling_areas, "beginner"),
            ),
            adaptive_recommendations=adaptive_recommendations(patterns, prediction),
            learning_patterns=patterns,
            performance_prediction=prediction,
            insights=learning_insights(patterns),
        )
