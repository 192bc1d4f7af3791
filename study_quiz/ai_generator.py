"""LLM-backed quiz generator: prompt in batches, parse JSON, decode quizzes."""
from __future__ import annotations

import json
import logging
import re
import uuid
from typing import TYPE_CHECKING

from study_quiz.models import Quiz, quiz_from_dict
from study_quiz.prompts import (
    INVALID_JSON_FEEDBACK,
    QUIZ_BATCH_PROMPT,
    SYSTEM_PROMPT,
    format_existing_questions,
    format_type_instructions,
    truncate_material,
)
from study_quiz.providers.base import LLMProvider, QuizGenerator

if TYPE_CHECKING:
    from study_quiz.config import Settings

_log = logging.getLogger("study_quiz.aigen")


def _extract_json(text: str) -> dict | None:
    """Pull the quiz payload out of a model response.

    Reasoning blocks are dropped and a fenced ```json block wins when it
    parses.  Otherwise every object that decodes cleanly is collected and
    the last one is returned, since drafts come before the final answer.
    """
    text = re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()

    fence = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if fence:
        try:
            return json.loads(fence.group(1))
        except json.JSONDecodeError:
            _log.debug("Fenced block is not valid JSON, scanning the whole response")

    objects = _decode_objects(text)
    return objects[-1] if objects else None


def _decode_objects(text: str) -> list[dict]:
    decoder = json.JSONDecoder()
    found: list[dict] = []
    start = text.find("{")
    while start != -1:
        try:
            obj, end = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            # Truncated or malformed here; an inner object may still decode
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            found.append(obj)
        start = text.find("{", end)
    return found


def _quiz_items(parsed: dict) -> list[dict]:
    items = parsed.get("quizzes")
    if not isinstance(items, list):
        # A single bare quiz object is accepted too
        return [parsed] if "type" in parsed else []
    return [item for item in items if isinstance(item, dict)]


class LLMQuizGenerator(QuizGenerator):
    def __init__(
        self,
        llm: LLMProvider,
        batch_size: int = 10,
        max_attempts: int = 5,
        max_material_chars: int = 4000,
        temperature: float = 0.7,
        thinking: bool = False,
    ):
        self.llm = llm
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.max_material_chars = max_material_chars
        self.temperature = temperature
        self.thinking = thinking

    def name(self) -> str:
        return self.llm.name()

    def build_prompt(
        self,
        material: str,
        types: list[str],
        start_index: int,
        existing: list[Quiz],
    ) -> str:
        return QUIZ_BATCH_PROMPT.format(
            count=len(types),
            material=truncate_material(material, self.max_material_chars),
            existing_section=format_existing_questions([q.question for q in existing]),
            type_instructions=format_type_instructions(types, start_index),
        )

    async def _generate_batch(
        self,
        material: str,
        types: list[str],
        start_index: int,
        existing: list[Quiz],
        feedback: str | None,
    ) -> list[Quiz] | None:
        """Run one batch request. Returns None when the response had no JSON."""
        prompt = self.build_prompt(material, types, start_index, existing)
        if feedback:
            prompt += "\n\n" + feedback
        response = await self.llm.generate(
            prompt, temperature=self.temperature, thinking=self.thinking, system=SYSTEM_PROMPT,
        )
        parsed = _extract_json(response)
        if parsed is None:
            _log.debug("  Raw response: %.300s", response)
            return None

        quizzes = []
        for offset, item in enumerate(_quiz_items(parsed)):
            quiz = quiz_from_dict(item)
            if quiz is None:
                _log.info("  Skipped item with unknown type %r", item.get("type"))
                continue
            quiz.id = f"ai_quiz_{start_index + offset}_{uuid.uuid4().hex[:8]}"
            quizzes.append(quiz)
        return quizzes

    async def generate(self, study_text: str, schedule: list[str], count: int) -> list[Quiz]:
        """Request *count* quizzes following *schedule*, retrying short rounds.

        Each round asks for whatever is still missing, in batches of
        ``batch_size``.  Batch failures are logged and retried in the next
        round; an empty list means the model produced nothing usable.
        """
        _log.info(
            "Generating %d quizzes with %s (%d chars of material)",
            count, self.llm.name(), len(study_text),
        )
        quizzes: list[Quiz] = []
        feedback: str | None = None

        for attempt in range(self.max_attempts):
            remaining = count - len(quizzes)
            if remaining <= 0:
                break
            _log.info("Attempt %d/%d: need %d more", attempt + 1, self.max_attempts, remaining)

            for _ in range(0, remaining, self.batch_size):
                start = len(quizzes)
                size = min(self.batch_size, count - start)
                if size <= 0:
                    break
                types = [schedule[(start + j) % len(schedule)] for j in range(size)]
                try:
                    batch = await self._generate_batch(study_text, types, start, quizzes, feedback)
                except Exception as e:
                    _log.warning("  Batch at %d failed: %s", start, e)
                    continue
                if batch is None:
                    feedback = INVALID_JSON_FEEDBACK
                    _log.info("  Batch at %d: no valid JSON, feeding back", start)
                    continue
                feedback = None
                quizzes.extend(batch)
                _log.info("  Progress: %d/%d", len(quizzes), count)

        if len(quizzes) < count:
            _log.warning("Only generated %d of %d requested quizzes", len(quizzes), count)
        return quizzes[:count]


def create_llm(settings: Settings) -> LLMProvider:
    if settings.llm_provider == "ollama":
        from study_quiz.providers.llm_ollama import OllamaProvider
        return OllamaProvider(base_url=settings.ollama_url, model=settings.llm_model)
    elif settings.llm_provider == "anthropic":
        from study_quiz.providers.llm_anthropic import AnthropicProvider
        return AnthropicProvider()
    elif settings.llm_provider == "openai":
        from study_quiz.providers.llm_openai import OpenAIProvider
        return OpenAIProvider()
    raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")


def create_generator(settings: Settings) -> QuizGenerator | None:
    """Build the configured quiz generator, or None when running offline."""
    if settings.offline:
        return None
    return LLMQuizGenerator(
        create_llm(settings),
        batch_size=settings.batch_size,
        max_attempts=settings.max_attempts,
        max_material_chars=settings.max_material_chars,
        temperature=settings.llm_temperature,
        thinking=settings.llm_thinking,
    )
