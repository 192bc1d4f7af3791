"""Offline quiz synthesis from raw study text.

Used when no external generator is configured, when it fails, or to top up
a short batch.  Every slot of the type schedule yields exactly one quiz; the
output is deterministic for a given text and schedule (apart from ids).
"""
from __future__ import annotations

import logging
import re
import uuid

from study_quiz.models import (
    ENUMERATION,
    FILL_BLANK,
    IDENTIFICATION,
    MATCHING,
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
from study_quiz.text_analysis import (
    capitalize,
    extract_key_terms,
    middle_long_word,
    split_sentences,
    strip_punctuation,
)

_log = logging.getLogger("study_quiz.fallback")

BLANK = "_____"
DEFAULT_CONCEPT = "concept"
MATCHING_SIZE = 4
MIN_ENUMERATION_ITEMS = 3
MC_DISTRACTORS = ("An unrelated concept", "The opposite meaning", "A different topic")


def _quiz_id(slot: int) -> str:
    return f"quiz_{slot}_{uuid.uuid4().hex[:8]}"


def _identification(slot: int, sentence: str, concept: str) -> Quiz:
    if slot % 2 == 0:
        question = sentence[:80]
    else:
        question = f"What term describes: {sentence[:60]}?"
    return IdentificationQuiz(
        id=_quiz_id(slot),
        question=question,
        explanation="This term is found in the study material.",
        correct_answer=capitalize(concept),
    )


def _fill_blank(slot: int, sentence: str, concept: str) -> Quiz:
    answer = strip_punctuation(middle_long_word(sentence) or "") or concept
    pattern = r"(?<!\w)" + re.escape(answer) + r"(?!\w)"
    question = re.sub(pattern, BLANK, sentence, count=1, flags=re.IGNORECASE)
    if BLANK not in question:
        question = f"{question} {BLANK}"
    return FillBlankQuiz(
        id=_quiz_id(slot),
        question=question,
        explanation="This word completes the statement from the material.",
        fill_blank_answers=[answer],
        correct_answer=[answer],
    )


def _true_false(slot: int, sentence: str, concept: str) -> Quiz:
    is_true = slot % 2 == 0
    keyword = strip_punctuation(middle_long_word(sentence) or "") or "term"
    return TrueFalseQuiz(
        id=_quiz_id(slot),
        question=sentence,
        explanation="This statement is accurate." if is_true else "This statement needs correction.",
        underlined_text=keyword,
        correct_answer="True" if is_true else "False",
        correct_replacement=keyword if is_true else concept,
    )


def _matching(slot: int, key_terms: list[str]) -> Quiz:
    terms = key_terms[:MATCHING_SIZE]
    while len(terms) < MATCHING_SIZE:
        terms.append(f"Term {len(terms) + 1}")
    return MatchingQuiz(
        id=_quiz_id(slot),
        question="Match the terms with their definitions:",
        explanation="These pairs represent key relationships.",
        pairs=[
            MatchingPair(left=f"{i + 1}. {capitalize(t)}", right=f"Definition for {t}")
            for i, t in enumerate(terms)
        ],
        correct_answer=[f"{i}:{i}" for i in range(1, len(terms) + 1)],
    )


def _enumeration(slot: int, key_terms: list[str]) -> Quiz:
    items = [capitalize(t) for t in key_terms[:4]]
    while len(items) < MIN_ENUMERATION_ITEMS:
        items.append(f"Concept {len(items) + 1}")
    return EnumerationQuiz(
        id=_quiz_id(slot),
        question=f"List {len(items)} key concepts from the material:",
        explanation="These are key concepts from the study material.",
        correct_answer=items,
    )


def _multiple_choice(slot: int, sentence: str, concept: str) -> Quiz:
    correct = sentence[:60]
    return MultipleChoiceQuiz(
        id=_quiz_id(slot),
        question=f"Which statement best describes {concept}?",
        explanation="This answer matches the study material.",
        options=[correct, *MC_DISTRACTORS],
        correct_answer=correct,
    )


def synthesize_quiz(
    question_type: str,
    slot: int,
    sentences: list[str],
    key_terms: list[str],
) -> Quiz:
    """Build the quiz for one schedule slot."""
    sentence = sentences[slot % max(len(sentences), 1)] if sentences else ""
    concept = key_terms[slot % len(key_terms)] if key_terms else DEFAULT_CONCEPT

    if question_type == IDENTIFICATION:
        return _identification(slot, sentence, concept)
    if question_type == FILL_BLANK:
        return _fill_blank(slot, sentence, concept)
    if question_type == TRUE_FALSE:
        return _true_false(slot, sentence, concept)
    if question_type == MATCHING:
        return _matching(slot, list(key_terms))
    if question_type == ENUMERATION:
        return _enumeration(slot, list(key_terms))
    return _multiple_choice(slot, sentence, concept)


def synthesize_quizzes(
    text: str,
    schedule: list[str],
    slots: list[int] | None = None,
) -> list[Quiz]:
    """Synthesize one quiz per schedule slot (or only for *slots*, if given)."""
    sentences = split_sentences(text)
    key_terms = extract_key_terms(text)
    if slots is None:
        slots = list(range(len(schedule)))
    _log.info(
        "Synthesizing %d quizzes offline (%d sentences, %d key terms)",
        len(slots), len(sentences), len(key_terms),
    )
    return [synthesize_quiz(schedule[i], i, sentences, key_terms) for i in slots]
