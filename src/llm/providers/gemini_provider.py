from __future__ import annotations
import os
from typing import Optional

import httpx
from .base import LLMProvider

class GeminiProvider(LLMProvider):
    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self.api_key = os.getenv("GEMINI_API_KEY", "").strip()
        self.model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip()
        self.base_url = os.getenv(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).strip()
        self.transport = transport

        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is missing")

    def generate(
        self,
        *,
        prompt: str,
        max_tokens: int,
        temperature: float,
        disable_reasoning: bool = False,
    ) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        generation_config = {
            "maxOutputTokens": max_tokens,
            "temperature": temperature,
        }
        if disable_reasoning:
            # thinking tokens count against maxOutputTokens
            generation_config["thinkingConfig"] = {"thinkingBudget": 0}

        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

        with httpx.Client(timeout=30.0, transport=self.transport) as client:
            r = client.post(url, headers=headers, json=payload)
            r.raise_for_status()
            data = r.json()

        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if not p.get("thought"))
