"""
Biographer Pipelines

Story-to-panel generation and the request/response helpers around it.
"""

from .base_pipeline import BasePipeline, PipelineResult, PipelineStatus, PipelineStep
from .story_aggregator import StoryAggregator
from .transcript_normalizer import TranscriptNormalizer, NormalizedStory
from .scene_segmenter import SceneSegmenter, SegmentationResult, fallback_scenes
from .narrative_polisher import NarrativePolisher, PolishResult
from .panel_renderer import PanelRenderer, RenderSlot, raise_on_failures
from .panel_writer import PanelWriter
from .cartoon_pipeline import (
    CartoonPipeline,
    GenerationRequest,
    GenerationConfig,
    GenerationOutcome,
)
from .question_generator import QuestionGenerator
from .answer_matcher import AnswerMatcher
from .transcript_filter import TranscriptFilter
from .transcription import AudioTranscriber

__all__ = [
    "BasePipeline",
    "PipelineResult",
    "PipelineStatus",
    "PipelineStep",
    "StoryAggregator",
    "TranscriptNormalizer",
    "NormalizedStory",
    "SceneSegmenter",
    "SegmentationResult",
    "fallback_scenes",
    "NarrativePolisher",
    "PolishResult",
    "PanelRenderer",
    "RenderSlot",
    "raise_on_failures",
    "PanelWriter",
    "CartoonPipeline",
    "GenerationRequest",
    "GenerationConfig",
    "GenerationOutcome",
    "QuestionGenerator",
    "AnswerMatcher",
    "TranscriptFilter",
    "AudioTranscriber",
]
