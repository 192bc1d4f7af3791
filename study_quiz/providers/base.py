from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from study_quiz.models import Quiz


class LLMProvider(ABC):
    @abstractmethod
    async def generate(
        self, prompt: str, temperature: float = 0.7, thinking: bool = True, system: str | None = None
    ) -> str:
        ...

    @abstractmethod
    def name(self) -> str:
        ...


class QuizGenerator(ABC):
    """External source of quiz candidates.

    Implementations may raise, or return fewer (or malformed) items than
    requested; the pipeline treats all of that as "unavailable" and falls
    back to offline synthesis.  Items may be ``Quiz`` objects or wire-format
    dicts.
    """

    @abstractmethod
    async def generate(self, study_text: str, schedule: list[str], count: int) -> list[Quiz | dict]:
        ...

    @abstractmethod
    def name(self) -> str:
        ...
