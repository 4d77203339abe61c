from __future__ import annotations
from abc import ABC, abstractmethod

class LLMProvider(ABC):
    @abstractmethod
    def generate(
        self,
        *,
        prompt: str,
        max_tokens: int,
        temperature: float,
        disable_reasoning: bool = False,
    ) -> str:
        """
        Return the raw model output as TEXT. Raise on any transport or provider error;
        LLMClient turns failures into None.
        """
        raise NotImplementedError
