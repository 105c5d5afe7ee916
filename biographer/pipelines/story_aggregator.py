"""
Story Aggregator

Combines a story's raw text with any blended memory captures and follow-up
answers into a single text blob for the model calls downstream.
"""

from typing import List

from biographer.core.logging_config import get_logger
from biographer.models.story import StoryRecord, MemoryCapture, QAPair
from biographer.storage.repository import StoryRepository

logger = get_logger("pipelines.story_aggregator")

MEMORIES_HEADER = "Based on these memories:"
CONTEXT_HEADER = "Additional context:"


class StoryAggregator:
    """Builds the combined narrative for a memory record.

    Read failures propagate: nothing downstream should spend provider calls on
    a story that could not be fully assembled.
    """

    def __init__(self, repository: StoryRepository):
        self.repository = repository

    async def aggregate(self, story: StoryRecord) -> str:
        """Story text, then memories, then follow-up Q&A, separated by headers."""
        captures = await self._load_captures(story)

        sections = [story.story_text]
        if captures:
            memories = "\n\n".join(self._format_capture(capture) for capture in captures)
            sections.append(f"{MEMORIES_HEADER}\n\n{memories}")

        qa_text = self._format_qa(story.context_qa or [])
        if qa_text:
            sections.append(f"{CONTEXT_HEADER}\n\n{qa_text}")

        full_story = "\n\n".join(sections)
        logger.info(
            f"Story {story.id}: aggregated {len(full_story)} chars "
            f"({len(captures)} memories, {len(story.context_qa or [])} answers)"
        )
        return full_story

    async def analysis_context(self, story: StoryRecord) -> str:
        """Compact context used when asking for clarifying questions."""
        captures = await self._load_captures(story)
        if not captures:
            return f"Story: {story.story_text}"

        memories = "\n".join(self._format_capture(capture) for capture in captures)
        return f"Story: {story.story_text}\n\nMemories:\n{memories}"

    async def _load_captures(self, story: StoryRecord) -> List[MemoryCapture]:
        if not story.memory_ids:
            return []
        captures = await self.repository.get_memory_captures(story.memory_ids)
        logger.debug(f"Fetched {len(captures)} memories for story {story.id}")
        return captures

    @staticmethod
    def _format_capture(capture: MemoryCapture) -> str:
        question = capture.question_text or "Memory"
        return f"{question}: {capture.answer_text}"

    @staticmethod
    def _format_qa(pairs: List[QAPair]) -> str:
        return "\n\n".join(f"{pair.question}\n{pair.answer}" for pair in pairs)
