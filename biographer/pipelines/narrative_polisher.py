"""
Narrative Polisher

Rewrites raw scenes (or user-authored panel descriptions) into short story
moments with one consistent tone. The moments become both the caption and
the heart of each image prompt.
"""

from dataclasses import dataclass, field
from typing import List

import httpx

from biographer.core.exceptions import LLMError
from biographer.core.logging_config import get_logger
from biographer.llm.prompts import PromptLibrary
from biographer.llm.structured import StructuredCompletion

logger = get_logger("pipelines.narrative_polisher")


@dataclass
class PolishResult:
    moments: List[str] = field(default_factory=list)
    used_fallback: bool = False


class NarrativePolisher:
    """One model pass over all scenes at once; never fatal."""

    def __init__(self, completion: StructuredCompletion):
        self.completion = completion

    async def polish(self, scenes: List[str]) -> PolishResult:
        if not scenes:
            return PolishResult()

        count = len(scenes)
        messages = [
            {"role": "system", "content": PromptLibrary.story_moment_polisher(count)},
            {"role": "user", "content": PromptLibrary.polish_request(scenes)},
        ]

        try:
            result = await self.completion.complete_json(
                messages,
                expect=list,
                fallback=lambda: list(scenes),
                label="story moment polishing",
            )
        except (LLMError, httpx.HTTPError) as e:
            logger.warning(f"Polishing failed, keeping raw scenes: {e}")
            return PolishResult(moments=list(scenes), used_fallback=True)

        if result.used_fallback:
            return PolishResult(moments=list(scenes), used_fallback=True)

        moments = [str(moment).strip() for moment in result.value]
        if len(moments) != count or not all(moments):
            logger.warning(f"Polisher returned {len(moments)} moments for {count} scenes, keeping raw scenes")
            return PolishResult(moments=list(scenes), used_fallback=True)

        logger.info(f"Polished {count} story moment(s)")
        return PolishResult(moments=moments)
