from __future__ import annotations

import os

from study_quiz.providers.base import LLMProvider


class OpenAIProvider(LLMProvider):
    def __init__(self, model: str = "gpt-4o-mini", max_tokens: int = 2000):
        import openai
        self.client = openai.AsyncOpenAI(
            api_key=os.environ.get("OPENAI_API_KEY", ""),
        )
        self.model = model
        self.max_tokens = max_tokens

    async def generate(
        self, prompt: str, temperature: float = 0.7, thinking: bool = True, system: str | None = None
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        resp = await self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            max_tokens=self.max_tokens,
            messages=messages,
            response_format={"type": "json_object"},
        )
        return resp.choices[0].message.content or ""

    def name(self) -> str:
        return f"openai/{self.model}"
