"""Tests for the FastAPI application routes."""
from __future__ import annotations

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from study_quiz import app as app_module
from study_quiz.app import app
from study_quiz.config import Settings

from conftest import SAMPLE_TEXT, StubGenerator


@pytest.fixture
def test_app():
    """App with offline settings; never touches config.json or a real LLM."""
    settings = Settings(llm_provider="none")

    # Set globals BEFORE creating TestClient so startup() is a no-op
    app_module._settings = settings

    with patch("study_quiz.app.save_settings") as save, \
         patch("study_quiz.app._get_generator", return_value=None):
        client = TestClient(app, raise_server_exceptions=False)
        yield client, settings, save
        client.close()

    app_module._settings = None


class TestGenerate:
    def test_mixed(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "count": 6})
        assert resp.status_code == 200
        data = resp.json()
        assert data["requested"] == 6
        assert data["achieved"] == 6
        assert data["shortfall"] == 0
        assert data["source"] == "fallback"
        assert len(data["quizzes"]) == 6

    def test_default_count(self, test_app):
        client, settings, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT})
        assert resp.json()["requested"] == settings.default_question_count

    def test_single_type(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "type": "true_false", "count": 2})
        assert [q["type"] for q in resp.json()["quizzes"]] == ["true_false", "true_false"]

    def test_type_list(self, test_app):
        client, _, _ = test_app
        resp = client.post(
            "/api/quizzes/generate",
            json={"text": SAMPLE_TEXT, "types": ["fill_blank", "enumeration"], "count": 2},
        )
        assert [q["type"] for q in resp.json()["quizzes"]] == ["fill_blank", "enumeration"]

    def test_true_false_wire_keys(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "type": "true_false", "count": 1})
        quiz = resp.json()["quizzes"][0]
        assert "underlinedText" in quiz
        assert "correctReplacement" in quiz

    def test_shortfall_reported(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "type": "matching", "count": 3})
        data = resp.json()
        assert data["achieved"] == 1
        assert data["shortfall"] == 2

    def test_uses_generator(self, test_app):
        client, _, _ = test_app
        with patch("study_quiz.app._get_generator", return_value=StubGenerator(per_slot=True)):
            resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "count": 4})
        data = resp.json()
        assert data["source"] == "ai"
        assert data["achieved"] == 4

    def test_failing_generator_falls_back(self, test_app):
        client, _, _ = test_app
        with patch("study_quiz.app._get_generator", return_value=StubGenerator(error=RuntimeError("down"))):
            resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "count": 3})
        assert resp.status_code == 200
        assert resp.json()["source"] == "fallback"

    def test_missing_text(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"count": 3})
        assert resp.status_code == 400

    def test_blank_text(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": "   ", "count": 3})
        assert resp.status_code == 400

    @pytest.mark.parametrize("count", [0, 101, "5", True, 2.5])
    def test_bad_count(self, test_app, count):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "count": count})
        assert resp.status_code == 400

    def test_bad_type(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json={"text": SAMPLE_TEXT, "type": 7})
        assert resp.status_code == 400

    def test_non_object_body(self, test_app):
        client, _, _ = test_app
        resp = client.post("/api/quizzes/generate", json=["not", "an", "object"])
        assert resp.status_code == 400

    def test_invalid_json_body(self, test_app):
        client, _, _ = test_app
        resp = client.post(
            "/api/quizzes/generate", content=b"{oops", headers={"content-type": "application/json"},
        )
        assert resp.status_code == 400


class TestValidate:
    def test_valid(self, test_app, wire_quizzes):
        client, _, _ = test_app
        quiz = dict(wire_quizzes[0], id="q1")
        resp = client.post("/api/quizzes/validate", json={"quiz": quiz})
        assert resp.json() == {"valid": True, "problems": []}

    def test_invalid(self, test_app):
        client, _, _ = test_app
        quiz = {"id": "q1", "type": "fill_blank", "question": "No blank here", "explanation": "e",
                "fill_blank_answers": ["x"]}
        data = client.post("/api/quizzes/validate", json={"quiz": quiz}).json()
        assert data["valid"] is False
        assert data["problems"] == ["fill blank question has no _____ marker"]

    def test_missing_quiz(self, test_app):
        client, _, _ = test_app
        assert client.post("/api/quizzes/validate", json={}).status_code == 400


class TestSettingsApi:
    def test_get(self, test_app):
        client, _, _ = test_app
        data = client.get("/api/settings").json()
        assert data["llm_provider"] == "none"
        assert len(data) == 11

    def test_put(self, test_app):
        client, settings, save = test_app
        resp = client.put("/api/settings", json={"batch_size": 4, "bogus": 1})
        assert resp.status_code == 200
        assert resp.json()["batch_size"] == 4
        assert settings.batch_size == 4
        assert "bogus" not in resp.json()
        save.assert_called_once_with(settings)
