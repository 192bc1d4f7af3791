"""Orchestrate quiz generation: schedule, generate or synthesize, clean up, trim.

The external generator is tried first.  When it is missing, raises, or yields
nothing structurally valid, the offline synthesizer takes over with the same
type schedule.  Either way every candidate goes through validation,
deduplication and normalization before the final count is applied.
"""
from __future__ import annotations

import logging
import random
from collections import Counter
from typing import TYPE_CHECKING

from study_quiz.dedup import dedupe_quizzes
from study_quiz.fallback import synthesize_quizzes
from study_quiz.models import MIXED, QUESTION_TYPES, QUIZ_CLASSES, Quiz, QuizResult, quiz_from_dict
from study_quiz.normalizer import normalize_quizzes
from study_quiz.validation import validate_quizzes

if TYPE_CHECKING:
    from study_quiz.providers.base import QuizGenerator

_log = logging.getLogger("study_quiz.pipeline")

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"
SOURCE_MIXED = "ai+fallback"


def resolve_question_types(selection: str | list[str] | None) -> list[str]:
    """Expand a type selection into a list of known question types.

    ``"mixed"`` stands for all six types.  Unknown tags are dropped; if
    nothing usable is left, all six types are used.
    """
    if selection is None:
        requested: list[str] = []
    elif isinstance(selection, str):
        requested = [selection]
    else:
        requested = list(selection)

    types: list[str] = []
    for t in requested:
        if t == MIXED:
            types.extend(QUESTION_TYPES)
        elif t in QUIZ_CLASSES:
            types.append(t)
        else:
            _log.warning("Ignoring unknown question type %r", t)
    if not types:
        _log.warning("No usable question types in %r, using all types", selection)
        types = list(QUESTION_TYPES)
    return types


def plan_type_schedule(selection: str | list[str] | None, count: int) -> list[str]:
    """Assign a question type to each of the *count* slots, round-robin."""
    types = resolve_question_types(selection)
    return [types[i % len(types)] for i in range(count)]


def finish_quizzes(quizzes: list[Quiz], count: int, source: str = SOURCE_AI) -> QuizResult:
    """Trim to *count* and report how many were actually delivered."""
    result = QuizResult(quizzes=quizzes[:count], requested=count, source=source)
    if result.shortfall:
        _log.warning(
            "Only %d unique quizzes of %d requested (%s)",
            result.achieved, count, source,
        )
    else:
        _log.info("Delivered %d quizzes (%s)", result.achieved, source)
    return result


def _decode(items: list) -> list[Quiz]:
    quizzes = []
    for item in items:
        quiz = item if isinstance(item, Quiz) else quiz_from_dict(item)
        if quiz is not None:
            quizzes.append(quiz)
    return quizzes


async def _try_generator(
    generator: QuizGenerator,
    study_text: str,
    schedule: list[str],
    count: int,
) -> list[Quiz]:
    try:
        raw = await generator.generate(study_text, schedule, count)
    except Exception as e:
        _log.warning("Generator %s failed, using fallback: %s", generator.name(), e)
        return []
    if not isinstance(raw, list):
        _log.warning("Generator %s returned %s, using fallback", generator.name(), type(raw).__name__)
        return []

    quizzes = validate_quizzes(_decode(raw))
    _log.info("Generator %s: %d returned, %d valid", generator.name(), len(raw), len(quizzes))
    if not quizzes:
        _log.warning("No valid quizzes from %s, using fallback", generator.name())
    return quizzes


def _missing_slots(schedule: list[str], present: list[Quiz]) -> list[int]:
    """Schedule positions whose type is under-represented in *present*."""
    needed = Counter(schedule) - Counter(q.question_type for q in present)
    slots = []
    for i, qtype in enumerate(schedule):
        if needed[qtype] > 0:
            slots.append(i)
            needed[qtype] -= 1
    return slots


async def _run_pipeline(
    study_text: str,
    type_selection: str | list[str] | None,
    count: int,
    generator: QuizGenerator | None,
    rng: random.Random | None,
    top_up: bool,
) -> QuizResult:
    schedule = plan_type_schedule(type_selection, count)
    _log.info("Target: %d quizzes, types: %s", count, ", ".join(dict.fromkeys(schedule)))

    candidates: list[Quiz] = []
    source = SOURCE_FALLBACK
    if generator is not None:
        candidates = await _try_generator(generator, study_text, schedule, count)
        if candidates:
            source = SOURCE_AI
    if not candidates:
        candidates = validate_quizzes(synthesize_quizzes(study_text, schedule))

    unique = dedupe_quizzes(candidates)
    _log.info("After deduplication: %d unique of %d", len(unique), len(candidates))

    if top_up and source == SOURCE_AI and len(unique) < count:
        slots = _missing_slots(schedule, unique)
        extra = validate_quizzes(synthesize_quizzes(study_text, schedule, slots))
        before = len(unique)
        unique = dedupe_quizzes(unique + extra)
        if len(unique) > before:
            source = SOURCE_MIXED
            _log.info("Topped up with %d offline quizzes", len(unique) - before)

    # Repairs such as underline-tag stripping can turn distinct candidates
    # into duplicates, so dedupe once more on the final text.
    normalized = normalize_quizzes(unique, rng)
    final = dedupe_quizzes(normalized)
    if len(final) < len(normalized):
        _log.info("Dropped %d duplicates after normalization", len(normalized) - len(final))
    return finish_quizzes(final, count, source)


async def generate_quizzes(
    study_text: str,
    type_selection: str | list[str] | None,
    count: int,
    generator: QuizGenerator | None = None,
    rng: random.Random | None = None,
    top_up: bool = True,
) -> QuizResult:
    """Produce up to *count* unique, normalized quizzes from *study_text*.

    Never raises: generator failures fall back to offline synthesis, and a
    short yield is reported through ``QuizResult.shortfall``.
    """
    count = max(count, 0)
    study_text = study_text or ""
    if count == 0:
        return QuizResult(quizzes=[], requested=0, source=SOURCE_FALLBACK)
    try:
        return await _run_pipeline(study_text, type_selection, count, generator, rng, top_up)
    except Exception:
        _log.exception("Quiz pipeline failed, retrying offline")

    try:
        return await _run_pipeline(study_text, type_selection, count, None, rng, top_up=False)
    except Exception:
        _log.exception("Offline quiz synthesis failed")
        return QuizResult(quizzes=[], requested=count, source=SOURCE_FALLBACK)
