"""
Transcript Filter

Condenses a raw conversation log into a story prompt.
"""

from biographer.core.logging_config import get_logger
from biographer.llm.api_clients import OpenAIClient
from biographer.llm.prompts import PromptLibrary

logger = get_logger("pipelines.transcript_filter")


class TranscriptFilter:
    """Keeps characters, setting, plot and key details; drops the rest."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    async def filter(self, conversation_text: str) -> str:
        messages = [
            {"role": "system", "content": PromptLibrary.CONVERSATION_FILTER},
            {"role": "user", "content": conversation_text},
        ]
        response = await self.client.chat(messages)

        story_prompt = response.text.strip()
        if not story_prompt:
            logger.warning("Conversation filter returned no text, using the conversation as-is")
            return conversation_text.strip()

        logger.info(f"Filtered conversation into a {len(story_prompt)} char story prompt")
        return story_prompt
