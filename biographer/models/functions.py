"""
Function Endpoint Models

Request and response bodies for the pipeline endpoints. Field aliases keep
the camelCase JSON the web client already sends.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class GenerateCartoonRequest(_CamelModel):
    """Start panel generation for a story."""
    story_id: str = Field(alias="storyId", min_length=1)
    advanced_mode: bool = Field(default=False, alias="advancedMode")


class GenerateCartoonResponse(BaseModel):
    success: bool = True
    panels: int


class AnalyzeStoryRequest(_CamelModel):
    """Ask for clarifying questions about a story."""
    story_id: str = Field(alias="storyId", min_length=1)


class AnalyzeStoryResponse(BaseModel):
    success: bool = True
    questions: List[str]


class AnalyzeAnswersRequest(_CamelModel):
    """Map a spoken transcript onto a fixed list of questions."""
    transcription: str
    questions: List[str]


class AnalyzeAnswersResponse(BaseModel):
    success: bool = True
    answers: Dict[str, str]


class FilterConversationRequest(_CamelModel):
    """Extract story elements from a raw conversation log."""
    conversation_text: str = Field(alias="conversationText")


class FilterConversationResponse(_CamelModel):
    success: bool = True
    story_prompt: str = Field(serialization_alias="storyPrompt")


class TranscribeAudioRequest(_CamelModel):
    """Base64-encoded audio to transcribe."""
    audio: str = ""


class TranscribeAudioResponse(BaseModel):
    success: bool = True
    text: str
