"""
Scoring for assessment and quiz responses.

A response score blends correctness (70%), time efficiency against a per-difficulty
threshold (20%) and a bonus for correctly answering harder questions (10%).
"""

from __future__ import annotations

from typing import Iterable, Optional

from learnpath.schemas.assessment_schemas import CategoryStats, Question, QuestionScore, ScoreRecommendation
from learnpath.schemas.profile_schemas import AssessmentResponse
from learnpath.utils.common import round_half_up

SCORING_WEIGHTS = {
    "correctness": 0.7,
    "time_efficiency": 0.2,
    "difficulty": 0.1,
}

# Reference answer time per difficulty, in seconds.
TIME_THRESHOLDS = {
    "basic": 45,
    "intermediate": 60,
    "advanced": 90,
}

DIFFICULTY_MULTIPLIERS = {
    "basic": 1.0,
    "intermediate": 1.3,
    "advanced": 1.6,
}

DEFAULT_DIFFICULTY = "intermediate"


def _difficulty(question: Question) -> str:
    d = (question.difficulty or DEFAULT_DIFFICULTY).lower()
    return d if d in TIME_THRESHOLDS else DEFAULT_DIFFICULTY


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def is_response_correct(question: Question, response: AssessmentResponse) -> bool:
    if response.is_correct is not None:
        return bool(response.is_correct)
    if response.selected_option is None:
        return False
    for opt in question.options:
        if response.selected_option in (opt.id, opt.text):
            return opt.is_correct
    return False


def score_question(question: Question, response: AssessmentResponse) -> QuestionScore:
    """Score a single response on a 0-100 scale."""
    difficulty = _difficulty(question)
    correct = is_response_correct(question, response)
    correctness_score = 1 if correct else 0

    threshold = TIME_THRESHOLDS[difficulty]
    # +0.5 recenters so answering exactly at the threshold yields 0.5.
    time_efficiency = _clamp((threshold - response.time_spent) / threshold + 0.5, 0.0, 1.0)

    bonus = (DIFFICULTY_MULTIPLIERS[difficulty] - 1) if correct else 0.0
    final = (
        correctness_score * SCORING_WEIGHTS["correctness"]
        + time_efficiency * SCORING_WEIGHTS["time_efficiency"]
        + bonus * SCORING_WEIGHTS["difficulty"]
    ) * 100

    return QuestionScore(
        score=_clamp(final, 0.0, 100.0),
        correctness_score=correctness_score,
        time_efficiency=time_efficiency,
        difficulty_bonus=bonus * SCORING_WEIGHTS["difficulty"] * 100,
    )


def _index(questions: Iterable[Question]) -> dict[str, Question]:
    return {q.id: q for q in questions}


def _matched(
    questions: Iterable[Question], responses: Iterable[AssessmentResponse]
) -> list[tuple[Question, AssessmentResponse]]:
    by_id = _index(questions)
    return [(by_id[r.question_id], r) for r in responses if r.question_id in by_id]


def score_overall(questions: Iterable[Question], responses: Iterable[AssessmentResponse]) -> int:
    """Difficulty-weighted average of question scores. 0 when nothing matches."""
    total_score = 0.0
    total_weight = 0.0
    for question, response in _matched(questions, responses):
        weight = DIFFICULTY_MULTIPLIERS[_difficulty(question)]
        total_score += score_question(question, response).score * weight
        total_weight += weight
    if total_weight <= 0:
        return 0
    return round_half_up(total_score / total_weight)


def level_for_score(score: float) -> str:
    if score >= 85:
        return "expert"
    if score >= 70:
        return "advanced"
    if score >= 50:
        return "intermediate"
    return "beginner"


def score_by_category(
    questions: Iterable[Question],
    responses: Iterable[AssessmentResponse],
    default_category: Optional[str] = None,
) -> dict[str, CategoryStats]:
    """Per-category accuracy, timing and score statistics."""
    stats: dict[str, CategoryStats] = {}
    scores: dict[str, list[float]] = {}

    for question, response in _matched(questions, responses):
        category = question.category or response.category or default_category or "general"
        s = stats.setdefault(category, CategoryStats())
        result = score_question(question, response)
        s.total_questions += 1
        s.correct_answers += result.correctness_score
        s.total_time += response.time_spent
        scores.setdefault(category, []).append(result.score)

    for category, s in stats.items():
        s.accuracy = s.correct_answers / s.total_questions * 100
        s.average_time = s.total_time / s.total_questions
        s.average_score = sum(scores[category]) / len(scores[category])
        s.level = level_for_score(s.average_score)
    return stats


def recommendations_from_stats(category_stats: dict[str, CategoryStats]) -> list[ScoreRecommendation]:
    recs: list[ScoreRecommendation] = []
    for category, s in category_stats.items():
        if s.accuracy < 60:
            recs.append(
                ScoreRecommendation(
                    type="review",
                    category=category,
                    priority="high",
                    message=f"Review the fundamentals of {category} ({round_half_up(s.accuracy)}% correct)",
                )
            )
        elif s.accuracy < 80:
            recs.append(
                ScoreRecommendation(
                    type="practice",
                    category=category,
                    priority="medium",
                    message=f"Practice more {category} to strengthen your results",
                )
            )

        if s.average_time > TIME_THRESHOLDS["intermediate"]:
            recs.append(
                ScoreRecommendation(
                    type="speed",
                    category=category,
                    priority="medium",
                    message=f"Work on your speed in {category} (average time: {round_half_up(s.average_time)}s)",
                )
            )
    return recs
