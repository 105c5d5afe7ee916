"""
Transcript Normalizer

Rewrites a two-party dialogue transcript into a third-person narrative.
Plain prose passes through untouched.
"""

from dataclasses import dataclass

import httpx

from biographer.core.exceptions import LLMError
from biographer.core.logging_config import get_logger
from biographer.llm.api_clients import OpenAIClient
from biographer.llm.prompts import PromptLibrary

logger = get_logger("pipelines.transcript_normalizer")

ROLE_MARKERS = ("User:", "AI:")


@dataclass
class NormalizedStory:
    """Narrative text plus how it was obtained."""
    text: str
    was_transcript: bool = False
    rewritten: bool = False


class TranscriptNormalizer:
    """Turns conversation transcripts into narrative text."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    @staticmethod
    def looks_like_transcript(text: str) -> bool:
        return any(marker in text for marker in ROLE_MARKERS)

    async def normalize(self, text: str) -> NormalizedStory:
        """Rewrite transcripts; fall back to the input when the rewrite fails."""
        if not self.looks_like_transcript(text):
            logger.info("Using original story text (not a conversation)")
            return NormalizedStory(text=text)

        logger.info("Detected conversation format, extracting story content")
        messages = [
            {"role": "system", "content": PromptLibrary.TRANSCRIPT_EXTRACTOR},
            {"role": "user", "content": text},
        ]

        try:
            response = await self.client.chat(messages)
        except (LLMError, httpx.HTTPError) as e:
            logger.warning(f"Story extraction failed, using original text: {e}")
            return NormalizedStory(text=text, was_transcript=True)

        narrative = response.text.strip()
        if not narrative:
            logger.warning("Story extraction returned no text, using original text")
            return NormalizedStory(text=text, was_transcript=True)

        logger.info(f"Story extracted: {narrative[:200]}")
        return NormalizedStory(text=narrative, was_transcript=True, rewritten=True)
