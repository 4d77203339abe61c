from __future__ import annotations

import logging
import math
import os
import re
from typing import Optional, Sequence

from llm.llm_client import LLMClient
from taskmind.models import CATEGORIES, PRIORITIES

logger = logging.getLogger(__name__)

ENRICHMENT_STRICT_LABELS = os.getenv("ENRICHMENT_STRICT_LABELS", "false").lower() in {
    "1",
    "true",
    "yes",
}

# Title and description are embedded as-is.
CATEGORY_PROMPT = (
    "You are a task classifier. Given a task title and description, return a "
    "single-word category among: Work, Personal, Errand, Study, Other. Output ONLY "
    'the category. Title: "{title}". Description: "{description}"'
)

PRIORITY_PROMPT = (
    "You are an assistant that suggests task priority. Output one of: Low, Medium, "
    "High. Consider deadlines, effort, and business impact. Output ONLY the word. "
    'Title: "{title}". Description: "{description}"'
)

ESTIMATE_PROMPT = (
    "Estimate how many hours (a number, optionally with 1 decimal) it would take to "
    "complete this task. Provide only a single number. "
    'Task title: "{title}". Description: "{description}"'
)

PROCEDURE_PROMPT = (
    "You are a productivity consultant. Given the task title and description, "
    "generate a step-by-step procedure (5-10 detailed steps) to easily and "
    "successfully complete this task. Format the output as a numbered list. "
    'Title: "{title}". Description: "{description}"'
)

SHORT_MAX_TOKENS = 10
ESTIMATE_MAX_TOKENS = 20
SHORT_TEMPERATURE = 0.1

PROCEDURE_MAX_TOKENS = 500
PROCEDURE_TEMPERATURE = 0.2

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)")


def parse_hours(text: Optional[str]) -> Optional[float]:
    """Read a leading number the way a lenient float parser would.

    "3.5 hours" -> 3.5, "unknown" -> None. Zero, negative and non-finite
    values are not usable estimates.
    """
    if not text:
        return None
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    value = float(match.group(0))
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def _match_label(value: Optional[str], labels: Sequence[str]) -> Optional[str]:
    if value is None:
        return None
    for label in labels:
        if value.strip().lower() == label.lower():
            return label
    return None


class TaskEnricher:
    """Turns a task's title/description into AI-suggested metadata.

    Every method returns None when the model gives nothing usable.
    """

    def __init__(self, llm_client: LLMClient, strict_labels: bool = ENRICHMENT_STRICT_LABELS):
        self.llm = llm_client
        self.strict_labels = strict_labels

    async def categorize(self, title: str, description: str) -> Optional[str]:
        result = await self.llm.agenerate(
            CATEGORY_PROMPT.format(title=title, description=description),
            SHORT_MAX_TOKENS,
            SHORT_TEMPERATURE,
            kind="category",
        )
        if self.strict_labels:
            return _match_label(result, CATEGORIES)
        return result

    async def suggest_priority(self, title: str, description: str) -> Optional[str]:
        result = await self.llm.agenerate(
            PRIORITY_PROMPT.format(title=title, description=description),
            SHORT_MAX_TOKENS,
            SHORT_TEMPERATURE,
            kind="priority",
        )
        if self.strict_labels:
            return _match_label(result, PRIORITIES)
        return result

    async def estimate_hours(self, title: str, description: str) -> Optional[float]:
        result = await self.llm.agenerate(
            ESTIMATE_PROMPT.format(title=title, description=description),
            ESTIMATE_MAX_TOKENS,
            SHORT_TEMPERATURE,
            kind="estimate",
        )
        estimate = parse_hours(result)
        if result is not None and estimate is None:
            logger.info(f"Discarding unparseable time estimate: {result[:40]!r}")
        return estimate

    async def generate_procedure(self, title: str, description: str) -> Optional[str]:
        return await self.llm.agenerate(
            PROCEDURE_PROMPT.format(title=title, description=description),
            PROCEDURE_MAX_TOKENS,
            PROCEDURE_TEMPERATURE,
            disable_reasoning=True,
            kind="procedure",
        )
