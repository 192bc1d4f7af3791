"""Remove exact and near-duplicate questions.

Two quizzes can only be duplicates when they share a question type.  The
first occurrence always wins.  Near-duplicates are found with a Jaccard
similarity over the long words of the normalized question text; no
embedding model is involved.
"""
from __future__ import annotations

import logging
import re

from study_quiz.models import Quiz

_log = logging.getLogger("study_quiz.dedup")

SIMILARITY_THRESHOLD = 0.70
MIN_TOKEN_LENGTH = 4  # tokens longer than 3 characters


def normalize_question(text: str) -> str:
    text = re.sub(r"\s+", " ", text.lower())
    return re.sub(r"[^\w\s]", "", text).strip()


def question_tokens(normalized: str) -> set[str]:
    return {w for w in normalized.split() if len(w) >= MIN_TOKEN_LENGTH}


def jaccard_similarity(a: set[str], b: set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def dedupe_quizzes(quizzes: list[Quiz]) -> list[Quiz]:
    """Return *quizzes* without exact or near duplicates, order preserved.

    Survivors are returned as-is (never mutated).  Running this on its own
    output removes nothing further.
    """
    seen: set[str] = set()
    # question_type -> [(question, tokens)] of accepted quizzes
    accepted: dict[str, list[tuple[str, set[str]]]] = {}
    unique: list[Quiz] = []
    exact = similar = 0

    for q in quizzes:
        normalized = normalize_question(q.question)
        key = f"{q.question_type}|{normalized}"
        if key in seen:
            exact += 1
            _log.debug("Removed exact duplicate: %.60s", q.question)
            continue

        tokens = question_tokens(normalized)
        match = None
        for existing_question, existing_tokens in accepted.get(q.question_type, []):
            score = jaccard_similarity(existing_tokens, tokens)
            if score > SIMILARITY_THRESHOLD:
                match = (existing_question, score)
                break
        if match:
            similar += 1
            _log.debug(
                "Removed similar question (%d%% match)\n  existing: %.50s\n  rejected: %.50s",
                round(match[1] * 100), match[0], q.question,
            )
            continue

        seen.add(key)
        accepted.setdefault(q.question_type, []).append((q.question, tokens))
        unique.append(q)

    if exact or similar:
        _log.info("Dedup removed %d exact + %d similar duplicates", exact, similar)
    return unique
