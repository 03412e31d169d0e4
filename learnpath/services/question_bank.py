"""
Static question bank.

The bank file is JSON keyed by category:
    {"math": [{"text": ..., "options": [{"text": ..., "is_correct": true}], "difficulty": ..., "explanation": ...}]}

Questions get stable ids `<category>-<n>` (1-based, file order) and options get `a`, `b`, ...
Selection shuffles through an injected `random.Random`; shuffling is presentation
only and carries no ordering guarantee.
"""

from __future__ import annotations

import json
import random
import string
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional

from learnpath.config import get_settings
from learnpath.schemas.assessment_schemas import PublicOption, PublicQuestion, Question, QuestionOption
from learnpath.schemas.goal_schemas import Goal
from learnpath.utils.logger import configure_logging

logger = configure_logging()

QUESTION_CONFIGS = {
    "assessment": {
        "questions_per_category": 5,
        "time_per_question": 60,  # seconds
        "passing_score": 60,
    },
    "quiz": {
        "questions_per_module": 10,
        "time_limit": 1800,  # seconds
        "passing_score": 70,
    },
}

QUIZ_PASSING_SCORE = QUESTION_CONFIGS["quiz"]["passing_score"]


def _build_question(category: str, n: int, raw: dict[str, Any]) -> Question:
    options = [
        QuestionOption(id=opt.get("id") or string.ascii_lowercase[i], text=opt["text"], is_correct=opt.get("is_correct", False))
        for i, opt in enumerate(raw.get("options", []))
    ]
    return Question(
        id=raw.get("id") or f"{category}-{n}",
        text=raw["text"],
        options=options,
        difficulty=raw.get("difficulty", "intermediate"),
        explanation=raw.get("explanation", ""),
        category=category,
    )


def shuffled(questions: Iterable[Question], rng: random.Random) -> list[Question]:
    """Copy of `questions` with question order and each option list shuffled."""
    out = []
    for q in questions:
        options = list(q.options)
        rng.shuffle(options)
        out.append(q.model_copy(update={"options": options}))
    rng.shuffle(out)
    return out


def to_public(question: Question) -> PublicQuestion:
    return PublicQuestion(
        id=question.id,
        text=question.text,
        category=question.category,
        difficulty=question.difficulty,
        options=[PublicOption(id=o.id, text=o.text) for o in question.options],
    )


class QuestionBank:
    def __init__(self, questions_by_category: dict[str, list[Question]]):
        self._by_category = questions_by_category

    @classmethod
    def from_dict(cls, data: dict[str, list[dict[str, Any]]]) -> "QuestionBank":
        return cls(
            {
                category: [_build_question(category, i + 1, raw) for i, raw in enumerate(items)]
                for category, items in data.items()
            }
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "QuestionBank":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        bank = cls.from_dict(data)
        logger.info("question bank loaded path=%s categories=%s", path, ",".join(bank.categories()))
        return bank

    def categories(self) -> list[str]:
        return list(self._by_category)

    def questions(self, category: Optional[str] = None) -> list[Question]:
        if category is None:
            return [q for items in self._by_category.values() for q in items]
        return list(self._by_category.get(category, []))

    def assessment_questions(
        self,
        categories: Optional[Iterable[str]] = None,
        rng: Optional[random.Random] = None,
        per_category: int = QUESTION_CONFIGS["assessment"]["questions_per_category"],
    ) -> list[Question]:
        rng = rng or random.Random()
        selected: list[Question] = []
        for category in categories or self.categories():
            selected.extend(shuffled(self.questions(category), rng)[:per_category])
        return selected

    def module_quiz(self, goal: Goal, module_index: int, pathway_id: str) -> list[Question]:
        """
        Quiz for one module of a pathway.

        Uses the module's own questions when it has any, otherwise the goal's category
        bank (all categories when that is empty). Seeded by pathway and module so the
        same learner gets the same quiz back when scoring.
        """

        rng = random.Random(f"{pathway_id}:{module_index}")
        module = goal.modules[module_index]
        pool = list(module.quiz_questions) or self.questions(goal.category) or self.questions()
        return shuffled(pool, rng)[: QUESTION_CONFIGS["quiz"]["questions_per_module"]]


@lru_cache
def get_question_bank() -> QuestionBank:
    return QuestionBank.from_file(get_settings().question_bank_path)
