from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

MULTIPLE_CHOICE = "multiple_choice"
TRUE_FALSE = "true_false"
FILL_BLANK = "fill_blank"
MATCHING = "matching"
ENUMERATION = "enumeration"
IDENTIFICATION = "identification"

# Order used when the caller asks for "mixed"
QUESTION_TYPES = (
    IDENTIFICATION,
    FILL_BLANK,
    TRUE_FALSE,
    MATCHING,
    ENUMERATION,
    MULTIPLE_CHOICE,
)
MIXED = "mixed"


@dataclass
class Quiz:
    id: str
    question: str
    explanation: str

    question_type: ClassVar[str] = ""

    @property
    def type(self) -> str:
        return self.question_type

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.question_type,
            "question": self.question,
            "explanation": self.explanation,
        }


@dataclass
class MultipleChoiceQuiz(Quiz):
    options: list[str] = field(default_factory=list)
    correct_answer: str = ""

    question_type: ClassVar[str] = MULTIPLE_CHOICE

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["options"] = list(self.options)
        d["correct_answer"] = self.correct_answer
        return d


@dataclass
class TrueFalseQuiz(Quiz):
    underlined_text: str = ""
    correct_answer: str = ""  # "True" | "False"
    correct_replacement: str = ""

    question_type: ClassVar[str] = TRUE_FALSE

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["underlinedText"] = self.underlined_text
        d["correct_answer"] = self.correct_answer
        d["correctReplacement"] = self.correct_replacement
        return d


@dataclass
class FillBlankQuiz(Quiz):
    fill_blank_answers: list[str] = field(default_factory=list)
    correct_answer: list[str] = field(default_factory=list)

    question_type: ClassVar[str] = FILL_BLANK

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["fill_blank_answers"] = list(self.fill_blank_answers)
        d["correct_answer"] = list(self.correct_answer)
        return d


@dataclass
class MatchingPair:
    left: str
    right: str


@dataclass
class MatchingQuiz(Quiz):
    pairs: list[MatchingPair] = field(default_factory=list)
    correct_answer: list[str] = field(default_factory=list)  # "left:right", 1-based

    question_type: ClassVar[str] = MATCHING

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["pairs"] = [{"left": p.left, "right": p.right} for p in self.pairs]
        d["correct_answer"] = list(self.correct_answer)
        return d


@dataclass
class EnumerationQuiz(Quiz):
    correct_answer: list[str] | str = field(default_factory=list)

    question_type: ClassVar[str] = ENUMERATION

    def to_dict(self) -> dict:
        d = super().to_dict()
        ans = self.correct_answer
        d["correct_answer"] = list(ans) if isinstance(ans, list) else ans
        return d


@dataclass
class IdentificationQuiz(Quiz):
    correct_answer: str = ""

    question_type: ClassVar[str] = IDENTIFICATION

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["correct_answer"] = self.correct_answer
        return d


QUIZ_CLASSES: dict[str, type[Quiz]] = {
    cls.question_type: cls
    for cls in (
        MultipleChoiceQuiz,
        TrueFalseQuiz,
        FillBlankQuiz,
        MatchingQuiz,
        EnumerationQuiz,
        IdentificationQuiz,
    )
}


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return ""


def _text_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [_text(v) for v in value if isinstance(v, (str, int, float))]


def _pairs(value) -> list[MatchingPair]:
    if not isinstance(value, list):
        return []
    pairs = []
    for p in value:
        if isinstance(p, dict) and "left" in p and "right" in p:
            pairs.append(MatchingPair(left=_text(p["left"]), right=_text(p["right"])))
    return pairs


def quiz_from_dict(data: dict) -> Quiz | None:
    """Decode a wire-format quiz dict into its typed variant.

    Returns ``None`` when the ``type`` tag is missing or unknown.  Payload
    fields of the wrong shape decode to empty values rather than raising, so
    the validator gets to reject them.
    """
    if not isinstance(data, dict):
        return None
    qtype = data.get("type")
    cls = QUIZ_CLASSES.get(qtype) if isinstance(qtype, str) else None
    if cls is None:
        return None

    common = {
        "id": _text(data.get("id")),
        "question": _text(data.get("question")),
        "explanation": _text(data.get("explanation")),
    }
    answer = data.get("correct_answer")

    if cls is MultipleChoiceQuiz:
        return MultipleChoiceQuiz(
            **common,
            options=_text_list(data.get("options")),
            correct_answer=_text(answer),
        )
    if cls is TrueFalseQuiz:
        return TrueFalseQuiz(
            **common,
            underlined_text=_text(data.get("underlinedText")),
            correct_answer=_text(answer),
            correct_replacement=_text(data.get("correctReplacement")),
        )
    if cls is FillBlankQuiz:
        if isinstance(answer, str):
            answer = [answer]
        return FillBlankQuiz(
            **common,
            fill_blank_answers=_text_list(data.get("fill_blank_answers")),
            correct_answer=_text_list(answer),
        )
    if cls is MatchingQuiz:
        return MatchingQuiz(
            **common,
            pairs=_pairs(data.get("pairs")),
            correct_answer=_text_list(answer),
        )
    if cls is EnumerationQuiz:
        return EnumerationQuiz(
            **common,
            correct_answer=_text_list(answer) if isinstance(answer, list) else _text(answer),
        )
    if isinstance(answer, list):
        answer = next((a for a in _text_list(answer) if a.strip()), "")
    return IdentificationQuiz(**common, correct_answer=_text(answer))


@dataclass
class QuizResult:
    quizzes: list[Quiz]
    requested: int
    source: str  # ai | fallback | ai+fallback

    @property
    def achieved(self) -> int:
        return len(self.quizzes)

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.achieved)

    def to_dict(self) -> dict:
        return {
            "quizzes": [q.to_dict() for q in self.quizzes],
            "requested": self.requested,
            "achieved": self.achieved,
            "shortfall": self.shortfall,
            "source": self.source,
        }
