"""FastAPI application exposing quiz generation and validation."""
from __future__ import annotations

import logging

logging.basicConfig(level=logging.INFO, format="%(name)s | %(message)s")

from fastapi import FastAPI, HTTPException, Request

from study_quiz.ai_generator import create_generator
from study_quiz.config import Settings, load_settings, save_settings
from study_quiz.models import MIXED
from study_quiz.providers.base import QuizGenerator
from study_quiz.question_generator import generate_quizzes
from study_quiz.validation import quiz_problems

app = FastAPI(title="Study Quiz")

_settings: Settings | None = None
_log = logging.getLogger("study_quiz.app")


def get_settings() -> Settings:
    assert _settings is not None
    return _settings


def _get_generator() -> QuizGenerator | None:
    s = get_settings()
    try:
        return create_generator(s)
    except Exception as e:
        _log.warning("Quiz generator unavailable (%s), generating offline", e)
        return None


@app.on_event("startup")
async def startup():
    global _settings
    if _settings is None:
        _settings = load_settings()
    _log.info("Using LLM provider: %s", _settings.llm_provider)


async def _json_body(request: Request) -> dict:
    if not await request.body():
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(400, "Request body must be JSON")
    if not isinstance(body, dict):
        raise HTTPException(400, "Request body must be a JSON object")
    return body


# ── API: Quizzes ──────────────────────────────────────────────────────────

@app.post("/api/quizzes/generate")
async def api_generate(request: Request):
    body = await _json_body(request)
    s = get_settings()

    text = body.get("text")
    if not isinstance(text, str) or not text.strip():
        raise HTTPException(400, "No study text provided")

    count = body.get("count", s.default_question_count)
    if isinstance(count, bool) or not isinstance(count, int):
        raise HTTPException(400, "count must be an integer")
    if not 1 <= count <= s.max_question_count:
        raise HTTPException(400, f"count must be between 1 and {s.max_question_count}")

    selection = body.get("types") or body.get("type") or MIXED
    if not isinstance(selection, (str, list)):
        raise HTTPException(400, "type must be a string or a list of strings")

    result = await generate_quizzes(
        text,
        selection,
        count,
        generator=_get_generator(),
        top_up=s.fallback_top_up,
    )
    return result.to_dict()


@app.post("/api/quizzes/validate")
async def api_validate(request: Request):
    body = await _json_body(request)
    quiz = body.get("quiz")
    if not isinstance(quiz, dict):
        raise HTTPException(400, "No quiz provided")
    problems = quiz_problems(quiz)
    return {"valid": not problems, "problems": problems}


# ── API: Settings ─────────────────────────────────────────────────────────

@app.get("/api/settings")
async def api_get_settings():
    return get_settings().to_dict()


@app.put("/api/settings")
async def api_update_settings(request: Request):
    body = await _json_body(request)
    s = get_settings()
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    for k, v in body.items():
        if k in known:
            setattr(s, k, v)
    save_settings(s)
    return s.to_dict()
