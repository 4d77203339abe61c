from __future__ import annotations
import os
from typing import Optional

import httpx
from .base import LLMProvider

class OllamaProvider(LLMProvider):
    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()
        self.transport = transport

    def generate(
        self,
        *,
        prompt: str,
        max_tokens: int,
        temperature: float,
        disable_reasoning: bool = False,
    ) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": self.model,
            "stream": False,
            "messages": [{"role": "user", "content": prompt}],
            "options": {"temperature": temperature, "num_predict": max_tokens},
        }
        if disable_reasoning:
            payload["think"] = False

        with httpx.Client(timeout=60.0, transport=self.transport) as client:
            r = client.post(url, json=payload)
            r.raise_for_status()
            data = r.json()

        return data["message"]["content"]
