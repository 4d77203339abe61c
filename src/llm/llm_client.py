import asyncio
import logging
import os
import re
from typing import Optional

from llm.providers.base import LLMProvider
from taskmind.metrics import ENRICHMENT_CALLS_TOTAL

logger = logging.getLogger(__name__)

LLM_TIMEOUT_S = float(os.getenv("LLM_TIMEOUT_S", "20"))

# letters, digits, dots and whitespace survive; dots keep "3.5" and "1." intact
_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9.\s]")


def clean_output(text: str) -> str:
    return _DISALLOWED_CHARS.sub("", text).strip()


def build_provider(name: Optional[str] = None) -> LLMProvider:
    """Instantiate the provider named by ``name`` or the LLM_PROVIDER env var."""
    name = (name or os.getenv("LLM_PROVIDER", "gemini")).strip().lower()

    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider

        return GeminiProvider()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider

        return OpenAIProvider()
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider

        return OllamaProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider()

    raise ValueError(f"Unknown LLM provider: {name}")


def _count(kind: str, outcome: str) -> None:
    try:
        ENRICHMENT_CALLS_TOTAL.labels(kind=kind, outcome=outcome).inc()
    except Exception:
        pass


class LLMClient:
    """Prompt-completion capability with a null-on-failure contract.

    ``provider`` may be None, in which case every call reports
    "enrichment unavailable" by returning None.
    """

    def __init__(self, provider: Optional[LLMProvider] = None, timeout_s: float = LLM_TIMEOUT_S):
        self.provider = provider
        self.timeout_s = timeout_s

    def generate(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        disable_reasoning: bool = False,
        kind: str = "generic",
    ) -> Optional[str]:
        if self.provider is None:
            _count(kind, "error")
            return None

        try:
            raw = self.provider.generate(
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                disable_reasoning=disable_reasoning,
            )
        except Exception as e:
            logger.error(f"LLM call failed ({kind}): {e}")
            _count(kind, "error")
            return None

        cleaned = clean_output(raw or "")
        if not cleaned:
            logger.error(f"LLM call returned no usable text ({kind})")
            _count(kind, "empty")
            return None

        _count(kind, "ok")
        return cleaned

    async def agenerate(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        disable_reasoning: bool = False,
        kind: str = "generic",
    ) -> Optional[str]:
        """Run ``generate`` off the event loop, giving up after ``timeout_s``."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    self.generate,
                    prompt,
                    max_tokens,
                    temperature,
                    disable_reasoning,
                    kind,
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            logger.error(f"LLM call timed out after {self.timeout_s}s ({kind})")
            _count(kind, "timeout")
            return None
