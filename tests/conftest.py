"""Shared test fixtures."""
from __future__ import annotations

import json

import pytest

from study_quiz.models import (
    EnumerationQuiz,
    FillBlankQuiz,
    IdentificationQuiz,
    MatchingPair,
    MatchingQuiz,
    MultipleChoiceQuiz,
    Quiz,
    TrueFalseQuiz,
)
from study_quiz.providers.base import QuizGenerator

SAMPLE_TEXT = (
    "Photosynthesis converts light energy into chemical energy inside chloroplasts. "
    "Chlorophyll absorbs mostly blue and red wavelengths of sunlight. "
    "Plants release oxygen as a byproduct of photosynthesis. "
    "Glucose produced during photosynthesis fuels cellular respiration."
)

# Distinct long words so stub questions never look alike to the deduplicator
TOPIC_WORDS = [
    "mitochondria", "ribosome", "nucleus", "membrane", "cytoplasm", "vacuole",
    "lysosome", "chromosome", "enzyme", "protein", "glucose", "oxygen",
    "nitrogen", "carbon", "osmosis", "diffusion", "meiosis", "mitosis",
]
PLACE_WORDS = [
    "leaves", "roots", "stems", "flowers", "seeds", "petals",
    "bark", "pollen", "spores", "fungi", "algae", "mosses",
    "ferns", "grasses", "shrubs", "vines", "cacti", "conifers",
]


def make_quiz(question_type: str, n: int, quiz_id: str | None = None) -> Quiz:
    """Build a structurally valid quiz whose question is unique per *n*."""
    word = TOPIC_WORDS[n % len(TOPIC_WORDS)]
    other = PLACE_WORDS[n % len(PLACE_WORDS)]
    qid = quiz_id or f"stub_{question_type}_{n}"
    if question_type == "multiple_choice":
        return MultipleChoiceQuiz(
            id=qid,
            question=f"Which describes {word} near {other}?",
            explanation="Stub explanation.",
            options=[word, other, "neither", "both"],
            correct_answer=word,
        )
    if question_type == "true_false":
        return TrueFalseQuiz(
            id=qid,
            question=f"The {word} surrounds the {other}.",
            explanation="Stub explanation.",
            underlined_text=word,
            correct_answer="True",
            correct_replacement=word,
        )
    if question_type == "fill_blank":
        return FillBlankQuiz(
            id=qid,
            question=f"The {word} works with _____ during {other}.",
            explanation="Stub explanation.",
            fill_blank_answers=["energy"],
            correct_answer=["energy"],
        )
    if question_type == "matching":
        return MatchingQuiz(
            id=qid,
            question=f"Match each {word} with its {other}:",
            explanation="Stub explanation.",
            pairs=[MatchingPair("1. A", "first"), MatchingPair("2. B", "second")],
            correct_answer=["1:1", "2:2"],
        )
    if question_type == "enumeration":
        return EnumerationQuiz(
            id=qid,
            question=f"List the parts of {word} and {other}:",
            explanation="Stub explanation.",
            correct_answer=["alpha", "beta", "gamma"],
        )
    return IdentificationQuiz(
        id=qid,
        question=f"What term names the {word} inside {other}?",
        explanation="Stub explanation.",
        correct_answer=word.capitalize(),
    )


class StubGenerator(QuizGenerator):
    """Quiz generator returning canned output (or raising) without network."""

    def __init__(self, quizzes=None, error: Exception | None = None, per_slot: bool = False):
        self.quizzes = quizzes or []
        self.error = error
        self.per_slot = per_slot
        self.calls: list[tuple[str, list[str], int]] = []

    async def generate(self, study_text, schedule, count):
        self.calls.append((study_text, list(schedule), count))
        if self.error is not None:
            raise self.error
        if self.per_slot:
            return [make_quiz(t, i) for i, t in enumerate(schedule)]
        return self.quizzes

    def name(self) -> str:
        return "stub"


class FakeLLM:
    """Fake LLM returning canned responses in order (the last one repeats)."""

    def __init__(self, responses=None, error: Exception | None = None):
        self._responses = responses or []
        self._error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str, temperature: float = 0.7, thinking: bool = True, system=None) -> str:
        self.prompts.append(prompt)
        if self._error is not None:
            raise self._error
        idx = min(len(self.prompts) - 1, len(self._responses) - 1)
        return self._responses[idx]

    def name(self) -> str:
        return "fake-llm"

    @property
    def call_count(self):
        return len(self.prompts)


def quizzes_response(items: list[dict]) -> str:
    return json.dumps({"quizzes": items})


@pytest.fixture
def sample_text():
    return SAMPLE_TEXT


@pytest.fixture
def short_text():
    """Three short sentences; none is long enough for the sentence pool."""
    return "Cells divide. Plants grow tall. Water evaporates."


@pytest.fixture
def wire_quizzes():
    """One valid wire-format dict per question type."""
    return [
        {
            "type": "multiple_choice",
            "question": "Which organelle performs photosynthesis?",
            "options": ["Chloroplast", "Nucleus", "Ribosome", "Vacuole"],
            "correct_answer": "Chloroplast",
            "explanation": "Chloroplasts contain chlorophyll.",
        },
        {
            "type": "true_false",
            "question": "Plants release carbon dioxide as a byproduct of photosynthesis.",
            "correct_answer": "False",
            "underlinedText": "carbon dioxide",
            "correctReplacement": "oxygen",
            "explanation": "Oxygen is released.",
        },
        {
            "type": "fill_blank",
            "question": "Chlorophyll absorbs _____ and _____ light.",
            "fill_blank_answers": ["blue", "red"],
            "correct_answer": ["blue", "red"],
            "explanation": "Those wavelengths are absorbed most strongly.",
        },
        {
            "type": "matching",
            "question": "Match the terms with their roles:",
            "pairs": [
                {"left": "1. Chlorophyll", "right": "Absorbs light"},
                {"left": "2. Glucose", "right": "Stores energy"},
                {"left": "3. Oxygen", "right": "Released gas"},
            ],
            "correct_answer": ["1:1", "2:2", "3:3"],
            "explanation": "Each term has one role.",
        },
        {
            "type": "enumeration",
            "question": "List the 2 products of photosynthesis:",
            "correct_answer": ["Glucose", "Oxygen"],
            "explanation": "Both are produced.",
        },
        {
            "type": "identification",
            "question": "The pigment that absorbs light in plants",
            "correct_answer": "Chlorophyll",
            "explanation": "Chlorophyll is the green pigment.",
        },
    ]
