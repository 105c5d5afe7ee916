"""
Structured Completion

Every stage that asks a model for JSON follows the same recipe: request, try
the bracket-extracted literal, try the whole content, and otherwise hand over
to a deterministic fallback supplied by the caller. Stages only declare their
fallback policy.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar, Union

from biographer.core.logging_config import get_logger
from biographer.llm.api_clients import ChatMessage, OpenAIClient

logger = get_logger("llm.structured")

T = TypeVar("T")

_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


@dataclass
class StructuredResult(Generic[T]):
    """Outcome of a structured completion."""
    value: T
    used_fallback: bool = False
    raw_text: str = ""


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_json_payload(text: str, expect: Union[Type[list], Type[dict]]) -> Optional[Any]:
    """Parse a JSON array or object out of model output.

    Tries the first bracket-matched literal, then the whole (fence-stripped)
    text. Returns None when neither yields a value of the expected type.
    """
    if not text:
        return None

    pattern = _ARRAY_PATTERN if expect is list else _OBJECT_PATTERN
    candidates = []
    match = pattern.search(text)
    if match:
        candidates.append(match.group(0))
    candidates.append(_strip_code_fence(text))

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, ValueError):
            continue
        if isinstance(value, expect):
            return value
    return None


class StructuredCompletion:
    """Runs chat completions that must come back as JSON."""

    def __init__(self, client: OpenAIClient, model: Optional[str] = None):
        self.client = client
        self.model = model

    async def complete_json(
        self,
        messages: List[ChatMessage],
        expect: Union[Type[list], Type[dict]],
        fallback: Callable[[], T],
        label: str = "completion",
    ) -> StructuredResult:
        """Request a completion and parse it.

        Provider errors propagate; only unparseable content triggers the fallback.
        """
        response = await self.client.chat(messages, model=self.model)
        value = parse_json_payload(response.text, expect)

        if value is None:
            logger.warning(f"{label}: response was not valid JSON, using fallback")
            return StructuredResult(value=fallback(), used_fallback=True, raw_text=response.text)

        return StructuredResult(value=value, raw_text=response.text)
