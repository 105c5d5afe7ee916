"""
Story Models

Row shapes for memory records, panels and memory captures, plus the
request bodies used to create and edit a story.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any
from datetime import datetime

from biographer.core.config import settings
from biographer.core.constants import StoryStatus, AnimationStyle


class QAPair(BaseModel):
    """A follow-up question and the user's answer."""
    question: str
    answer: str = ""


class PanelDescription(BaseModel):
    """A user-authored panel for advanced mode."""
    description: str = Field(min_length=1)
    reference_image_url: Optional[str] = None


class StoryRecord(BaseModel):
    """A memory record as stored in the stories table."""
    id: str
    user_id: str
    story_text: str = ""
    photo_url: Optional[str] = None
    memory_ids: Optional[List[str]] = None
    context_qa: Optional[List[QAPair]] = None
    panel_descriptions: Optional[List[PanelDescription]] = None
    desired_panels: Optional[int] = None
    animation_style: Optional[str] = None
    # Stored for the client; not sent to any provider
    temperature: Optional[float] = None
    status: StoryStatus = StoryStatus.DRAFT
    failure_reason: Optional[str] = None
    generation_attempt: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("context_qa", mode="before")
    @classmethod
    def _drop_malformed_qa(cls, value: Any) -> Any:
        # context_qa is a free-form JSON column
        if not isinstance(value, list):
            return None
        return [item for item in value if isinstance(item, dict) and "question" in item]

    @field_validator("generation_attempt", mode="before")
    @classmethod
    def _default_attempt(cls, value: Any) -> Any:
        return 0 if value is None else value


class PanelRecord(BaseModel):
    """One illustrated scene belonging to a story."""
    id: Optional[str] = None
    story_id: str
    order_index: int = Field(ge=0)
    scene_text: str
    image_url: str
    created_at: Optional[datetime] = None


class MemoryCapture(BaseModel):
    """A previously answered template question."""
    id: str
    answer_text: str
    question_text: Optional[str] = None


class StoryCreate(BaseModel):
    """Create story request."""
    user_id: str
    story_text: str = Field(min_length=1)
    photo_url: Optional[str] = None
    memory_ids: Optional[List[str]] = None
    context_qa: Optional[List[QAPair]] = None
    panel_descriptions: Optional[List[PanelDescription]] = Field(default=None, max_length=settings.max_panel_count)
    desired_panels: Optional[int] = Field(default=None, ge=1, le=settings.max_panel_count)
    animation_style: Optional[AnimationStyle] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)


class StoryUpdate(BaseModel):
    """Edit generation parameters before a run."""
    story_text: Optional[str] = Field(default=None, min_length=1)
    memory_ids: Optional[List[str]] = None
    context_qa: Optional[List[QAPair]] = None
    panel_descriptions: Optional[List[PanelDescription]] = Field(default=None, max_length=settings.max_panel_count)
    desired_panels: Optional[int] = Field(default=None, ge=1, le=settings.max_panel_count)
    animation_style: Optional[AnimationStyle] = None
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    status: Optional[StoryStatus] = None

    @field_validator("status")
    @classmethod
    def _only_pre_generation_status(cls, value: Optional[StoryStatus]) -> Optional[StoryStatus]:
        if value is not None and value not in (StoryStatus.DRAFT, StoryStatus.PENDING):
            raise ValueError("status can only be set to 'draft' or 'pending'")
        return value


class StoryWithPanels(BaseModel):
    """A story and its panels in display order."""
    story: StoryRecord
    panels: List[PanelRecord] = Field(default_factory=list)
