"""Structural soundness checks for quiz candidates."""
from __future__ import annotations

import logging

from study_quiz.models import (
    EnumerationQuiz,
    FillBlankQuiz,
    MatchingQuiz,
    MultipleChoiceQuiz,
    Quiz,
    TrueFalseQuiz,
    quiz_from_dict,
)

_log = logging.getLogger("study_quiz.validate")

BLANK = "_____"


def quiz_problems(quiz: Quiz | dict) -> list[str]:
    """Return human-readable reasons why *quiz* is structurally unsound.

    An empty list means the quiz is valid.  Wire-format dicts are decoded
    first; an unknown type is reported as a single problem.
    """
    if isinstance(quiz, dict):
        decoded = quiz_from_dict(quiz)
        if decoded is None:
            return [f"unknown question type: {quiz.get('type')!r}"]
        quiz = decoded

    problems = []
    if not quiz.id.strip():
        problems.append("missing id")
    if not quiz.question.strip():
        problems.append("missing question")
    if not quiz.explanation.strip():
        problems.append("missing explanation")

    if isinstance(quiz, MultipleChoiceQuiz):
        if len(quiz.options) < 2:
            problems.append(f"multiple choice needs at least 2 options (got {len(quiz.options)})")
    elif isinstance(quiz, MatchingQuiz):
        if len(quiz.pairs) < 2:
            problems.append(f"matching needs at least 2 pairs (got {len(quiz.pairs)})")
    elif isinstance(quiz, EnumerationQuiz):
        if not isinstance(quiz.correct_answer, list) or len(quiz.correct_answer) < 2:
            problems.append("enumeration needs a list of at least 2 items")
    elif isinstance(quiz, TrueFalseQuiz):
        if not quiz.underlined_text:
            problems.append("true/false missing underlined text")
        if not quiz.correct_replacement:
            problems.append("true/false missing correct replacement")
    elif isinstance(quiz, FillBlankQuiz):
        if BLANK not in quiz.question:
            problems.append("fill blank question has no _____ marker")
        if not quiz.fill_blank_answers:
            problems.append("fill blank has no answers")
    return problems


def is_valid_quiz(quiz: Quiz | dict) -> bool:
    return not quiz_problems(quiz)


def validate_quizzes(quizzes: list[Quiz]) -> list[Quiz]:
    """Keep only structurally sound quizzes, logging each one dropped."""
    valid = []
    for q in quizzes:
        problems = quiz_problems(q)
        if problems:
            _log.info("Dropped invalid %s quiz %s: %s", q.question_type, q.id, "; ".join(problems))
            continue
        valid.append(q)
    return valid
