from __future__ import annotations

import logging
import time

import httpx

from study_quiz.providers.base import LLMProvider

log = logging.getLogger("study_quiz.llm")


class OllamaProvider(LLMProvider):
    def __init__(self, base_url: str = "http://localhost:11434", model: str = "qwen3:8b", timeout: float = 120.0):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    async def generate(
        self, prompt: str, temperature: float = 0.7, thinking: bool = True, system: str | None = None
    ) -> str:
        log.debug("── PROMPT (%s) ──\n%s", self.model, prompt)
        body: dict = {
            "model": self.model,
            "prompt": prompt,
            "temperature": temperature,
            "stream": False,
            "think": thinking,
            "format": "json",
        }
        if system:
            body["system"] = system

        t0 = time.monotonic()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(f"{self.base_url}/api/generate", json=body)
            resp.raise_for_status()
            data = resp.json()
        elapsed = time.monotonic() - t0
        response = data["response"]
        tokens = data.get("eval_count", "?")
        log.info("Ollama responded in %.1fs (%s tokens)", elapsed, tokens)
        log.debug("── RESPONSE ──\n%s", response)
        return response

    def name(self) -> str:
        return f"ollama/{self.model}"
