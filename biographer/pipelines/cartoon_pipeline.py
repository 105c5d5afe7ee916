"""
Cartoon Pipeline

Story-to-panel generation for one memory record:
1. Lease - read the record and move it into processing
2. Aggregate - story text, memories and follow-up answers
3. Normalize - rewrite dialogue transcripts as narrative
4. Segment - split the narrative into N scenes
5. Polish - rewrite scenes as short story moments
6. Render - one concurrent image request per moment
7. Write - insert panel rows in order
8. Finalize - mark the record complete

Any failure after the lease marks the record failed with the reason.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from biographer.core.constants import StoryStatus
from biographer.core.exceptions import PipelineStageError
from biographer.core.logging_config import get_logger
from biographer.models.story import StoryRecord, PanelRecord
from biographer.storage.repository import StoryRepository
from .base_pipeline import BasePipeline, PipelineStep
from .story_aggregator import StoryAggregator
from .transcript_normalizer import TranscriptNormalizer
from .scene_segmenter import SceneSegmenter
from .narrative_polisher import NarrativePolisher
from .panel_renderer import PanelRenderer, raise_on_failures
from .panel_writer import PanelWriter

logger = get_logger("pipelines.cartoon")

MAX_FAILURE_REASON = 1000


@dataclass
class GenerationRequest:
    """Input for the cartoon pipeline."""
    story_id: str
    advanced_mode: bool = False


@dataclass
class GenerationConfig:
    """Per-run generation parameters resolved from the record."""
    panel_count: int
    style: Optional[str]
    advanced_mode: bool = False
    polish: bool = True


@dataclass
class GenerationOutcome:
    """Output of a successful run."""
    story_id: str
    panels: List[PanelRecord]
    degraded_steps: List[str] = field(default_factory=list)


class CartoonPipeline(BasePipeline[GenerationRequest, GenerationOutcome]):
    """Generates and stores the illustrated panels for one story."""

    def __init__(
        self,
        repository: StoryRepository,
        aggregator: StoryAggregator,
        normalizer: TranscriptNormalizer,
        segmenter: SceneSegmenter,
        polisher: NarrativePolisher,
        renderer: PanelRenderer,
        writer: PanelWriter,
        default_panel_count: int = 3,
        max_panel_count: int = 8,
        polish_scenes: bool = True,
    ):
        self.repository = repository
        self.aggregator = aggregator
        self.normalizer = normalizer
        self.segmenter = segmenter
        self.polisher = polisher
        self.renderer = renderer
        self.writer = writer
        self.default_panel_count = default_panel_count
        self.max_panel_count = max_panel_count
        self.polish_scenes = polish_scenes

        super().__init__("CartoonGeneration")

    def _define_steps(self) -> None:
        self._steps = [
            PipelineStep("lease", "Read the story and start a generation attempt"),
            PipelineStep("aggregate", "Combine story, memories and answers"),
            PipelineStep("normalize", "Rewrite conversation transcripts"),
            PipelineStep("segment", "Split the story into scenes"),
            PipelineStep("polish", "Rewrite scenes as story moments"),
            PipelineStep("render", "Generate panel images"),
            PipelineStep("write", "Save panels"),
            PipelineStep("finalize", "Mark the story complete"),
        ]

    async def generate(self, story_id: str, advanced_mode: bool = False) -> GenerationOutcome:
        """Run the pipeline and return its outcome, raising the original error on failure."""
        result = await self.run(GenerationRequest(story_id=story_id, advanced_mode=advanced_mode))
        return result.unwrap()

    async def _execute_step(
        self,
        step: PipelineStep,
        input_data: Any,
        context: Dict[str, Any]
    ) -> Any:
        if step.name == "lease":
            return await self._lease(input_data, context)
        elif step.name == "aggregate":
            return await self._aggregate(input_data, context)
        elif step.name == "normalize":
            return await self._normalize(input_data, context)
        elif step.name == "segment":
            return await self._segment(input_data, context)
        elif step.name == "polish":
            return await self._polish(input_data, context)
        elif step.name == "render":
            return await self._render(input_data, context)
        elif step.name == "write":
            return await self._write(input_data, context)
        elif step.name == "finalize":
            return await self._finalize(input_data, context)
        else:
            raise ValueError(f"Unknown step: {step.name}")

    async def _on_failure(self, error: BaseException, context: Dict[str, Any]) -> None:
        if not context.get("lease_acquired"):
            return
        story: StoryRecord = context["story"]
        reason = str(error)[:MAX_FAILURE_REASON] or error.__class__.__name__
        await self.repository.set_status(story.id, StoryStatus.FAILED, failure_reason=reason)

    # =========================================================================
    # STEPS
    # =========================================================================

    async def _lease(self, request: GenerationRequest, context: Dict[str, Any]) -> StoryRecord:
        logger.info(f"Generating cartoon for story: {request.story_id}")
        story = await self.repository.get_story(request.story_id)
        config = self._resolve_config(story, request.advanced_mode)

        story = await self.repository.acquire_generation_lease(story)
        context["lease_acquired"] = True
        context["story"] = story
        context["config"] = config
        context["degraded"] = []

        # Panels from an earlier failed attempt would collide with this run's ordinals
        await self.repository.delete_panels(story.id)
        return story

    async def _aggregate(self, story: StoryRecord, context: Dict[str, Any]) -> Optional[str]:
        if context["config"].advanced_mode:
            return None
        return await self.aggregator.aggregate(story)

    async def _normalize(self, full_story: Optional[str], context: Dict[str, Any]) -> Optional[str]:
        if full_story is None:
            return None
        normalized = await self.normalizer.normalize(full_story)
        if normalized.was_transcript and not normalized.rewritten:
            context["degraded"].append("normalize")
        return normalized.text

    async def _segment(self, narrative: Optional[str], context: Dict[str, Any]) -> List[str]:
        story: StoryRecord = context["story"]
        config: GenerationConfig = context["config"]

        if config.advanced_mode:
            return [panel.description for panel in story.panel_descriptions]

        result = await self.segmenter.segment(narrative, config.panel_count, story.story_text)
        if result.used_fallback:
            context["degraded"].append("segment")
        if not result.scenes:
            raise PipelineStageError("segment", "no scenes could be derived from the story")
        return result.scenes

    async def _polish(self, scenes: List[str], context: Dict[str, Any]) -> List[str]:
        config: GenerationConfig = context["config"]
        if not config.polish:
            return scenes

        result = await self.polisher.polish(scenes)
        if result.used_fallback:
            context["degraded"].append("polish")
        return result.moments

    async def _render(self, moments: List[str], context: Dict[str, Any]):
        story: StoryRecord = context["story"]
        config: GenerationConfig = context["config"]

        references = None
        if config.advanced_mode:
            references = [panel.reference_image_url for panel in story.panel_descriptions]

        slots = await self.renderer.render(moments, config.style, references)
        raise_on_failures(slots)
        return slots

    async def _write(self, slots, context: Dict[str, Any]) -> List[PanelRecord]:
        return await self.writer.write(context["story"].id, slots)

    async def _finalize(self, panels: List[PanelRecord], context: Dict[str, Any]) -> GenerationOutcome:
        story: StoryRecord = context["story"]
        await self.repository.set_status(story.id, StoryStatus.COMPLETE)

        degraded = context["degraded"]
        if degraded:
            logger.warning(f"Story {story.id} completed with fallbacks in: {', '.join(degraded)}")
        logger.info(f"Cartoon generation complete for story {story.id}: {len(panels)} panel(s)")
        return GenerationOutcome(story_id=story.id, panels=panels, degraded_steps=list(degraded))

    # =========================================================================
    # CONFIG
    # =========================================================================

    def _resolve_config(self, story: StoryRecord, advanced_mode: bool) -> GenerationConfig:
        if advanced_mode:
            if not story.panel_descriptions:
                raise PipelineStageError("lease", "advanced mode requires panel descriptions")
            panel_count = len(story.panel_descriptions)
            if panel_count > self.max_panel_count:
                raise PipelineStageError(
                    "lease",
                    f"advanced mode supports at most {self.max_panel_count} panels, got {panel_count}",
                )
        else:
            panel_count = story.desired_panels or self.default_panel_count
            panel_count = max(1, min(panel_count, self.max_panel_count))

        return GenerationConfig(
            panel_count=panel_count,
            style=story.animation_style,
            advanced_mode=advanced_mode,
            polish=advanced_mode or self.polish_scenes,
        )
