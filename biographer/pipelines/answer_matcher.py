"""
Answer Matcher

Maps one spoken transcript onto a fixed list of questions.
"""

from typing import Dict, List

from biographer.core.logging_config import get_logger
from biographer.llm.prompts import PromptLibrary
from biographer.llm.structured import StructuredCompletion

logger = get_logger("pipelines.answer_matcher")


class AnswerMatcher:
    """Returns an answer for every question index, empty when unanswered."""

    def __init__(self, completion: StructuredCompletion):
        self.completion = completion

    async def match(self, transcription: str, questions: List[str]) -> Dict[str, str]:
        if not questions:
            return {}

        messages = [
            {"role": "system", "content": PromptLibrary.ANSWER_MATCHER},
            {"role": "user", "content": PromptLibrary.answer_request(transcription, questions)},
        ]
        result = await self.completion.complete_json(
            messages,
            expect=dict,
            fallback=dict,
            label="answer matching",
        )

        raw = {str(key).strip(): value for key, value in result.value.items()}
        answers = {}
        for index in range(len(questions)):
            value = raw.get(str(index))
            answers[str(index)] = str(value).strip() if value is not None else ""

        answered = sum(1 for answer in answers.values() if answer)
        logger.info(f"Matched {answered}/{len(questions)} answer(s)")
        return answers
