"""
Question Generator

Reads a story (and its blended memories) and asks the model which gaps, if
filled, would make the cartoon more vivid.
"""

from typing import List

from biographer.core.logging_config import get_logger
from biographer.llm.prompts import PromptLibrary
from biographer.llm.structured import StructuredCompletion
from biographer.storage.repository import StoryRepository
from .story_aggregator import StoryAggregator

logger = get_logger("pipelines.question_generator")

MAX_QUESTIONS = 5

FALLBACK_QUESTIONS = [
    "What was the main character wearing?",
    "What time of day did this happen?",
    "How did you feel during this moment?",
]


class QuestionGenerator:
    """Produces up to five clarifying questions for a story."""

    def __init__(self, repository: StoryRepository, completion: StructuredCompletion):
        self.repository = repository
        self.completion = completion
        self.aggregator = StoryAggregator(repository)

    async def generate(self, story_id: str) -> List[str]:
        story = await self.repository.get_story(story_id)
        context = await self.aggregator.analysis_context(story)

        messages = [
            {"role": "system", "content": PromptLibrary.QUESTION_GENERATOR},
            {"role": "user", "content": PromptLibrary.question_request(context)},
        ]
        result = await self.completion.complete_json(
            messages,
            expect=list,
            fallback=lambda: list(FALLBACK_QUESTIONS),
            label="question generation",
        )

        questions = [str(question).strip() for question in result.value if str(question).strip()]
        if not questions:
            logger.warning(f"No usable questions for story {story_id}, using defaults")
            questions = list(FALLBACK_QUESTIONS)

        questions = questions[:MAX_QUESTIONS]
        logger.info(f"Generated {len(questions)} question(s) for story {story_id}")
        return questions
