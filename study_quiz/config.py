from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "llm_provider": "ollama",
    "llm_model": "qwen3:8b",
    "ollama_url": "http://localhost:11434",
    "llm_temperature": 0.7,
    "llm_thinking": False,
    "batch_size": 10,
    "max_attempts": 5,
    "max_material_chars": 4000,
    "default_question_count": 10,
    "max_question_count": 100,
    "fallback_top_up": True,
}


@dataclass
class Settings:
    llm_provider: str = DEFAULTS["llm_provider"]  # ollama | openai | anthropic | none
    llm_model: str = DEFAULTS["llm_model"]
    ollama_url: str = DEFAULTS["ollama_url"]
    llm_temperature: float = DEFAULTS["llm_temperature"]
    llm_thinking: bool = DEFAULTS["llm_thinking"]
    batch_size: int = DEFAULTS["batch_size"]
    max_attempts: int = DEFAULTS["max_attempts"]
    max_material_chars: int = DEFAULTS["max_material_chars"]
    default_question_count: int = DEFAULTS["default_question_count"]
    max_question_count: int = DEFAULTS["max_question_count"]
    fallback_top_up: bool = DEFAULTS["fallback_top_up"]

    @property
    def offline(self) -> bool:
        return self.llm_provider in ("", "none", "offline")

    def to_dict(self) -> dict:
        return {
            "llm_provider": self.llm_provider,
            "llm_model": self.llm_model,
            "ollama_url": self.ollama_url,
            "llm_temperature": self.llm_temperature,
            "llm_thinking": self.llm_thinking,
            "batch_size": self.batch_size,
            "max_attempts": self.max_attempts,
            "max_material_chars": self.max_material_chars,
            "default_question_count": self.default_question_count,
            "max_question_count": self.max_question_count,
            "fallback_top_up": self.fallback_top_up,
        }


def load_settings() -> Settings:
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
        known = {f.name for f in Settings.__dataclass_fields__.values()}
        filtered = {k: v for k, v in raw.items() if k in known}
        return Settings(**filtered)
    return Settings()


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
