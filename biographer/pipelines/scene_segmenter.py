"""
Scene Segmenter

Splits a narrative into N short, connected scene descriptions.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, List

from biographer.core.logging_config import get_logger
from biographer.llm.prompts import PromptLibrary
from biographer.llm.structured import StructuredCompletion

logger = get_logger("pipelines.scene_segmenter")

SENTENCE_SPLIT = re.compile(r"[.!?]+")
MIN_FALLBACK_FRAGMENT = 20


@dataclass
class SegmentationResult:
    """Ordered scenes for a story."""
    scenes: List[str] = field(default_factory=list)
    used_fallback: bool = False


def fallback_scenes(story_text: str, count: int) -> List[str]:
    """Naive sentence split: fragments longer than the minimum, first `count` of them."""
    fragments = [fragment.strip() for fragment in SENTENCE_SPLIT.split(story_text)]
    return [fragment for fragment in fragments if len(fragment) > MIN_FALLBACK_FRAGMENT][:count]


def scene_to_text(scene: Any) -> str:
    """Flatten whatever shape the model used for a scene into one string."""
    if isinstance(scene, str):
        return scene.strip()
    if isinstance(scene, dict):
        if scene.get("scene"):
            return str(scene["scene"]).strip()
        if scene.get("setting") and scene.get("action"):
            text = f"{scene['setting']} {scene['action']}"
            if scene.get("emotion"):
                text += f" {scene['emotion']}"
            return text.strip()
        logger.warning(f"Unknown scene format: {scene}")
    return json.dumps(scene)


class SceneSegmenter:
    """Asks a text model for exactly N scenes.

    Provider errors are fatal for the run. Unparseable output falls back to
    sentence-splitting the user's original story text.
    """

    def __init__(self, completion: StructuredCompletion):
        self.completion = completion

    async def segment(self, narrative: str, count: int, original_text: str) -> SegmentationResult:
        label = "scene" if count == 1 else f"{count} scenes"
        logger.info(f"Analyzing story and creating {label}")

        messages = [
            {"role": "system", "content": PromptLibrary.scene_segmenter(count)},
            {"role": "user", "content": PromptLibrary.scene_request(narrative, count)},
        ]
        result = await self.completion.complete_json(
            messages,
            expect=list,
            fallback=lambda: fallback_scenes(original_text, count),
            label="scene segmentation",
        )

        scenes = [text for text in (scene_to_text(item) for item in result.value) if text]
        if len(scenes) > count:
            logger.debug(f"Model returned {len(scenes)} scenes, keeping the first {count}")
            scenes = scenes[:count]

        logger.info(f"Generated {len(scenes)} scene(s){' (fallback)' if result.used_fallback else ''}")
        return SegmentationResult(scenes=scenes, used_fallback=result.used_fallback)
