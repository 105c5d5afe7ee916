"""
Pytest Configuration and Fixtures

Shared fixtures for all tests: an in-memory story repository, a scripted
provider client and a factory for fully wired cartoon pipelines.
"""

import base64
import itertools
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from biographer.core.constants import StoryStatus, GENERATION_START_STATES
from biographer.core.exceptions import (
    StorageError,
    StoryNotFoundError,
    GenerationConflictError,
)
from biographer.llm.api_clients import ImageResponse, TextResponse
from biographer.llm.prompts import PromptLibrary
from biographer.llm.structured import StructuredCompletion
from biographer.models.story import StoryRecord, StoryCreate, PanelRecord, MemoryCapture
from biographer.pipelines import (
    CartoonPipeline,
    NarrativePolisher,
    PanelRenderer,
    PanelWriter,
    SceneSegmenter,
    StoryAggregator,
    TranscriptNormalizer,
)

FAKE_PNG_B64 = base64.b64encode(b"\x89PNG fake image bytes").decode()


# =============================================================================
# IN-MEMORY REPOSITORY
# =============================================================================

class InMemoryStoryRepository:
    """Same contract as StoryRepository, backed by dicts."""

    def __init__(self):
        self.stories: Dict[str, Dict[str, Any]] = {}
        self.panels: List[Dict[str, Any]] = []
        self.captures: Dict[str, MemoryCapture] = {}
        self.uploads: Dict[str, bytes] = {}
        self.status_history: List[str] = []
        self.fail_insert_at: Optional[int] = None
        self._ids = itertools.count(1)

    def add_story(self, **fields) -> StoryRecord:
        story_id = fields.pop("id", None) or f"story-{next(self._ids)}"
        row = {
            "id": story_id,
            "user_id": "user-1",
            "story_text": "",
            "status": StoryStatus.PENDING.value,
            "generation_attempt": 0,
        }
        row.update(fields)
        self.stories[story_id] = row
        return StoryRecord.model_validate(row)

    def panels_for(self, story_id: str) -> List[Dict[str, Any]]:
        return sorted(
            (panel for panel in self.panels if panel["story_id"] == story_id),
            key=lambda panel: panel["order_index"],
        )

    async def get_story(self, story_id: str) -> StoryRecord:
        if story_id not in self.stories:
            raise StoryNotFoundError(story_id)
        return StoryRecord.model_validate(self.stories[story_id])

    async def create_story(self, story: StoryCreate) -> StoryRecord:
        return self.add_story(**story.model_dump(mode="json", exclude_none=True))

    async def update_story(self, story_id: str, updates: Dict[str, Any]) -> StoryRecord:
        if story_id not in self.stories:
            raise StoryNotFoundError(story_id)
        self.stories[story_id].update(updates)
        return StoryRecord.model_validate(self.stories[story_id])

    async def delete_story(self, story_id: str) -> None:
        await self.delete_panels(story_id)
        if self.stories.pop(story_id, None) is None:
            raise StoryNotFoundError(story_id)

    async def set_status(self, story_id: str, status: StoryStatus, failure_reason: Optional[str] = None) -> None:
        self.stories[story_id].update({"status": status.value, "failure_reason": failure_reason})
        self.status_history.append(status.value)

    async def acquire_generation_lease(self, story: StoryRecord) -> StoryRecord:
        row = self.stories[story.id]
        startable = {state.value for state in GENERATION_START_STATES}
        if row["generation_attempt"] != story.generation_attempt or row["status"] not in startable:
            raise GenerationConflictError(story.id, story.status.value)
        row.update({
            "status": StoryStatus.PROCESSING.value,
            "generation_attempt": story.generation_attempt + 1,
            "failure_reason": None,
        })
        self.status_history.append(StoryStatus.PROCESSING.value)
        return StoryRecord.model_validate(row)

    async def get_memory_captures(self, capture_ids: List[str]) -> List[MemoryCapture]:
        return [self.captures[capture_id] for capture_id in capture_ids if capture_id in self.captures]

    async def insert_panel(self, panel: PanelRecord) -> PanelRecord:
        if self.fail_insert_at is not None and panel.order_index == self.fail_insert_at:
            raise StorageError(f"Failed to insert panel: position {panel.order_index}")
        row = panel.model_dump(mode="json", exclude_none=True)
        row["id"] = f"panel-{next(self._ids)}"
        self.panels.append(row)
        return PanelRecord.model_validate(row)

    async def list_panels(self, story_id: str) -> List[PanelRecord]:
        return [PanelRecord.model_validate(row) for row in self.panels_for(story_id)]

    async def delete_panels(self, story_id: str) -> int:
        before = len(self.panels)
        self.panels = [panel for panel in self.panels if panel["story_id"] != story_id]
        return before - len(self.panels)

    async def upload_file(self, path: str, content: bytes, content_type: str) -> str:
        self.uploads[path] = content
        return f"https://storage.test/cartoons/{path}"


# =============================================================================
# SCRIPTED PROVIDER
# =============================================================================

Reply = Union[str, BaseException, Callable[[List[Dict[str, str]]], str]]

STAGE_MARKERS = {
    "normalize": PromptLibrary.TRANSCRIPT_EXTRACTOR,
    "filter": PromptLibrary.CONVERSATION_FILTER,
    "segment": "You are a creative story analyzer.",
    "polish": "You turn cartoon panel scenes into short story moments.",
    "questions": PromptLibrary.QUESTION_GENERATOR,
    "answers": PromptLibrary.ANSWER_MATCHER,
}


def stage_of(messages: List[Dict[str, str]]) -> str:
    system = next((m["content"] for m in messages if m["role"] == "system"), "")
    for stage, marker in STAGE_MARKERS.items():
        if system.startswith(marker):
            return stage
    raise AssertionError(f"Unrecognized system prompt: {system[:60]}")


class FakeOpenAIClient:
    """Answers chat calls per pipeline stage and records every request."""

    def __init__(self):
        self.replies: Dict[str, Reply] = {}
        self.image_errors: Dict[str, BaseException] = {}
        self.image_urls = False
        self.chat_calls: List[Dict[str, Any]] = []
        self.image_calls: List[Dict[str, Any]] = []
        self.transcribe_calls: List[bytes] = []
        self.transcript_text = "transcribed text"

    def calls_for(self, stage: str) -> List[Dict[str, Any]]:
        return [call for call in self.chat_calls if call["stage"] == stage]

    async def chat(self, messages, model=None) -> TextResponse:
        stage = stage_of(messages)
        self.chat_calls.append({"stage": stage, "messages": list(messages)})
        if stage not in self.replies:
            raise AssertionError(f"No scripted reply for stage '{stage}'")
        reply = self.replies[stage]
        if isinstance(reply, BaseException):
            raise reply
        text = reply(messages) if callable(reply) else reply
        return TextResponse(text=text, model=model or "fake-text")

    async def generate_image(self, prompt, size="1024x1024", quality="medium", reference_image=None, model=None):
        self.image_calls.append({"prompt": prompt, "reference_image": reference_image, "size": size})
        for marker, error in self.image_errors.items():
            if marker in prompt:
                raise error
        if self.image_urls:
            return ImageResponse(model="fake-image", url=f"https://images.test/{len(self.image_calls)}.png")
        return ImageResponse(model="fake-image", b64_json=FAKE_PNG_B64)

    async def transcribe(self, audio, filename="audio.webm", content_type="audio/webm", model=None):
        self.transcribe_calls.append(audio)
        return self.transcript_text


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def repository() -> InMemoryStoryRepository:
    return InMemoryStoryRepository()


@pytest.fixture
def fake_client() -> FakeOpenAIClient:
    return FakeOpenAIClient()


@pytest.fixture
def completion(fake_client) -> StructuredCompletion:
    return StructuredCompletion(fake_client)


@pytest.fixture
def make_pipeline(repository, fake_client, completion):
    """Build a cartoon pipeline over the in-memory fakes."""

    def _make(polish_scenes: bool = True, upload_images: bool = False, max_panel_count: int = 8):
        return CartoonPipeline(
            repository=repository,
            aggregator=StoryAggregator(repository),
            normalizer=TranscriptNormalizer(fake_client),
            segmenter=SceneSegmenter(completion),
            polisher=NarrativePolisher(completion),
            renderer=PanelRenderer(fake_client),
            writer=PanelWriter(repository, upload_images=upload_images),
            default_panel_count=3,
            max_panel_count=max_panel_count,
            polish_scenes=polish_scenes,
        )

    return _make


@pytest.fixture
def sample_story_text() -> str:
    return (
        "I went to the beach with my dog on a sunny morning. "
        "We chased the waves until the tide rolled in. "
        "Afterwards we shared an ice cream on the boardwalk."
    )
