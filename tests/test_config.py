"""Tests for configuration loading and saving."""
from __future__ import annotations

import json
from unittest.mock import patch

from study_quiz.config import DEFAULTS, Settings, load_settings, save_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.llm_provider == "ollama"
        assert s.batch_size == 10
        assert s.max_question_count == 100
        assert s.fallback_top_up is True

    def test_defaults_match_table(self):
        assert Settings().to_dict() == DEFAULTS

    def test_to_dict(self):
        d = Settings().to_dict()
        assert d["llm_provider"] == "ollama"
        assert len(d) == 11  # all fields present

    def test_to_dict_roundtrip(self):
        s = Settings(llm_provider="anthropic", default_question_count=25)
        s2 = Settings(**s.to_dict())
        assert s2.llm_provider == "anthropic"
        assert s2.default_question_count == 25

    def test_offline(self):
        assert Settings(llm_provider="none").offline
        assert Settings(llm_provider="").offline
        assert not Settings(llm_provider="openai").offline


class TestLoadSaveSettings:
    def test_load_from_file(self, tmp_path):
        config = {"llm_provider": "openai", "batch_size": 5}
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps(config))

        with patch("study_quiz.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.llm_provider == "openai"
        assert s.batch_size == 5
        # Defaults for unspecified fields
        assert s.max_attempts == 5

    def test_load_missing_file(self, tmp_path):
        config_path = tmp_path / "nonexistent.json"
        with patch("study_quiz.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.llm_provider == "ollama"  # all defaults

    def test_save_creates_file(self, tmp_path):
        config_path = tmp_path / "config.json"
        with patch("study_quiz.config.CONFIG_PATH", config_path):
            save_settings(Settings(llm_provider="anthropic"))

        data = json.loads(config_path.read_text())
        assert data["llm_provider"] == "anthropic"
        assert data["fallback_top_up"] is True

    def test_unknown_keys_ignored(self, tmp_path):
        config = {"llm_provider": "ollama", "unknown_key": "value"}
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps(config))

        with patch("study_quiz.config.CONFIG_PATH", config_path):
            s = load_settings()
        assert s.llm_provider == "ollama"
        assert not hasattr(s, "unknown_key")
