from __future__ import annotations
import os
from typing import Optional

import httpx
from .base import LLMProvider

class OpenAIProvider(LLMProvider):
    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        self.transport = transport

        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is missing")

    def generate(
        self,
        *,
        prompt: str,
        max_tokens: int,
        temperature: float,
        disable_reasoning: bool = False,
    ) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        with httpx.Client(timeout=30.0, transport=self.transport) as client:
            r = client.post(url, headers=headers, json=payload)
            r.raise_for_status()
            data = r.json()

        return data["choices"][0]["message"]["content"] or ""
