"""Per-type repair pass applied to every quiz before it is emitted.

Each handler restores the structural invariants of its question type
without changing what the question asks.  Re-running the pass on its own
output changes nothing, except for matching quizzes: their right column is
reshuffled on every call, so each quiz must be normalized exactly once.
"""
from __future__ import annotations

import logging
import random
import re
from collections.abc import Callable

from study_quiz.models import (
    ENUMERATION,
    FILL_BLANK,
    IDENTIFICATION,
    MATCHING,
    MULTIPLE_CHOICE,
    TRUE_FALSE,
    EnumerationQuiz,
    FillBlankQuiz,
    IdentificationQuiz,
    MatchingPair,
    MatchingQuiz,
    MultipleChoiceQuiz,
    Quiz,
    TrueFalseQuiz,
)
from study_quiz.text_analysis import long_words, strip_punctuation

_log = logging.getLogger("study_quiz.normalize")

BLANK = "_____"
_INDEXED_BLANK = re.compile(r"\[BLANK[\s_-]?\d*\]", re.IGNORECASE)
_CANONICAL_BLANK = re.compile(r"(?<!_)_{5}(?!_)")
_UNDERSCORE_RUN = re.compile(r"_{3,}")
_UNDERLINE_SPAN = re.compile(r"\[UNDERLINE\](.*?)\[/UNDERLINE\]|<u>(.*?)</u>", re.IGNORECASE | re.DOTALL)
_UNDERLINE_TAG = re.compile(r"\[/?UNDERLINE\]|</?u>", re.IGNORECASE)

_TRUE_WORDS = {"true", "t", "yes", "1"}
_FALSE_WORDS = {"false", "f", "no", "0"}

ENUMERATION_PLACEHOLDERS = ["Key concept 1", "Key concept 2", "Key concept 3"]
MC_FILLER_OPTIONS = ["None of the above", "All of the above"]


def _normalize_true_false(quiz: TrueFalseQuiz, rng) -> TrueFalseQuiz:
    underlined = quiz.underlined_text.strip()
    if not underlined:
        m = _UNDERLINE_SPAN.search(quiz.question)
        if m:
            underlined = (m.group(1) or m.group(2) or "").strip()
    quiz.question = _UNDERLINE_TAG.sub("", quiz.question).strip()

    if not underlined:
        words = [strip_punctuation(w) for w in long_words(quiz.question)]
        underlined = next((w for w in words if w), "term")
    quiz.underlined_text = underlined

    if not quiz.correct_replacement.strip():
        quiz.correct_replacement = underlined

    verdict = quiz.correct_answer.strip().lower()
    if verdict in _TRUE_WORDS:
        is_true = True
    elif verdict in _FALSE_WORDS:
        is_true = False
    else:
        is_true = quiz.correct_replacement.strip().lower() == underlined.lower()
    quiz.correct_answer = "True" if is_true else "False"
    if is_true:
        quiz.correct_replacement = underlined
    return quiz


def _placeholder_answer(answers: list[str], position: int) -> str:
    n = position + 1
    while f"answer{n}" in answers:
        n += 1
    return f"answer{n}"


def _normalize_fill_blank(quiz: FillBlankQuiz, rng) -> FillBlankQuiz:
    # Answers stay aligned with their blanks; empty entries are filled in place
    answers = [a.strip() for a in quiz.fill_blank_answers]
    if not any(answers):
        answers = [a.strip() for a in quiz.correct_answer]
    if not any(answers):
        answers = ["answer"]

    question = _INDEXED_BLANK.sub(BLANK, quiz.question)
    if not _CANONICAL_BLANK.search(question):
        question = _UNDERSCORE_RUN.sub(BLANK, question)
    if not _CANONICAL_BLANK.search(question):
        question = f"{question.rstrip()} {BLANK}"
    quiz.question = question

    blank_count = len(_CANONICAL_BLANK.findall(question))
    if len(answers) != blank_count:
        _log.info(
            "Fill blank %s: %d blanks but %d answers, reconciling",
            quiz.id, blank_count, len(answers),
        )
    answers = answers[:blank_count]
    for i, answer in enumerate(answers):
        if not answer:
            answers[i] = _placeholder_answer(answers, i)
    while len(answers) < blank_count:
        answers.append(_placeholder_answer(answers, len(answers)))

    quiz.fill_blank_answers = answers
    quiz.correct_answer = list(answers)
    return quiz


def _parse_answer_ref(entry: str, size: int) -> tuple[int, int] | None:
    """Parse ``"left:right"`` into 1-based indices, or None if unusable."""
    left_str, _, right_str = entry.partition(":")
    try:
        left = int(left_str.strip())
    except ValueError:
        return None
    try:
        right = int(right_str.strip())
    except ValueError:
        right = left
    if not (1 <= left <= size and 1 <= right <= size):
        return None
    return left, right


def shuffle_permutation(size: int, rng) -> list[int]:
    """Fisher-Yates permutation: ``result[new_position] = old_position``."""
    order = list(range(size))
    for i in range(size - 1, 0, -1):
        j = rng.randrange(i + 1)
        order[i], order[j] = order[j], order[i]
    return order


def _normalize_matching(quiz: MatchingQuiz, rng) -> MatchingQuiz:
    size = len(quiz.pairs)
    if size < 2:
        return quiz
    if not quiz.correct_answer:
        quiz.correct_answer = [f"{i}:{i}" for i in range(1, size + 1)]

    # 1. snapshot the original right column
    original_right = [p.right for p in quiz.pairs]
    # 2. compute the permutation and its inverse
    order = shuffle_permutation(size, rng)
    new_position = {old: new for new, old in enumerate(order)}
    # 3. rebuild pairs and remap the answer key
    quiz.pairs = [
        MatchingPair(left=p.left, right=original_right[order[i]])
        for i, p in enumerate(quiz.pairs)
    ]
    remapped = []
    for entry in quiz.correct_answer:
        ref = _parse_answer_ref(entry, size)
        if ref is None:
            _log.info("Matching %s: dropped unusable answer entry %r", quiz.id, entry)
            continue
        left, right = ref
        remapped.append(f"{left}:{new_position[right - 1] + 1}")
    if not remapped:
        _log.info("Matching %s: no usable answer entries, assuming pairs were listed matched", quiz.id)
        remapped = [f"{i + 1}:{new_position[i] + 1}" for i in range(size)]
    quiz.correct_answer = remapped
    return quiz


def _normalize_enumeration(quiz: EnumerationQuiz, rng) -> EnumerationQuiz:
    items = quiz.correct_answer
    if not isinstance(items, list):
        items = [items]
    items = [i.strip() for i in items if isinstance(i, str) and i.strip()]
    if len(items) < 2:
        items = list(ENUMERATION_PLACEHOLDERS)
    quiz.correct_answer = items
    return quiz


def _normalize_multiple_choice(quiz: MultipleChoiceQuiz, rng) -> MultipleChoiceQuiz:
    options: list[str] = []
    for o in quiz.options:
        o = o.strip()
        if o and o not in options:
            options.append(o)

    correct = quiz.correct_answer.strip()
    if correct not in options:
        match = next((o for o in options if o.lower() == correct.lower()), None)
        if match is not None:
            correct = match
        elif correct:
            options.append(correct)
        elif options:
            correct = options[0]

    for filler in MC_FILLER_OPTIONS:
        if len(options) >= 2:
            break
        if filler not in options:
            options.append(filler)
    if not correct:
        correct = options[0]

    quiz.options = options
    quiz.correct_answer = correct
    return quiz


def _normalize_identification(quiz: IdentificationQuiz, rng) -> IdentificationQuiz:
    quiz.correct_answer = quiz.correct_answer.strip() or "Answer"
    return quiz


_HANDLERS: dict[str, Callable] = {
    TRUE_FALSE: _normalize_true_false,
    FILL_BLANK: _normalize_fill_blank,
    MATCHING: _normalize_matching,
    ENUMERATION: _normalize_enumeration,
    MULTIPLE_CHOICE: _normalize_multiple_choice,
    IDENTIFICATION: _normalize_identification,
}


def normalize_quiz(quiz: Quiz, rng: random.Random | None = None) -> Quiz:
    """Repair *quiz* in place and return it."""
    handler = _HANDLERS.get(quiz.question_type)
    if handler is None:
        return quiz
    return handler(quiz, rng or random)


def normalize_quizzes(quizzes: list[Quiz], rng: random.Random | None = None) -> list[Quiz]:
    return [normalize_quiz(q, rng) for q in quizzes]
