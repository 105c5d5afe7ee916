"""
Pydantic Models for Storage and API
"""

from .story import (
    QAPair,
    PanelDescription,
    StoryRecord,
    PanelRecord,
    MemoryCapture,
    StoryCreate,
    StoryUpdate,
    StoryWithPanels,
)
from .functions import (
    GenerateCartoonRequest,
    GenerateCartoonResponse,
    AnalyzeStoryRequest,
    AnalyzeStoryResponse,
    AnalyzeAnswersRequest,
    AnalyzeAnswersResponse,
    FilterConversationRequest,
    FilterConversationResponse,
    TranscribeAudioRequest,
    TranscribeAudioResponse,
)

__all__ = [
    "QAPair",
    "PanelDescription",
    "StoryRecord",
    "PanelRecord",
    "MemoryCapture",
    "StoryCreate",
    "StoryUpdate",
    "StoryWithPanels",
    "GenerateCartoonRequest",
    "GenerateCartoonResponse",
    "AnalyzeStoryRequest",
    "AnalyzeStoryResponse",
    "AnalyzeAnswersRequest",
    "AnalyzeAnswersResponse",
    "FilterConversationRequest",
    "FilterConversationResponse",
    "TranscribeAudioRequest",
    "TranscribeAudioResponse",
]
