"""
Panel Image Renderer

Issues one image request per story moment, all at once, and collects one
result slot per panel once every request has settled.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence

from biographer.core.constants import map_animation_style
from biographer.core.exceptions import PanelRenderError
from biographer.core.logging_config import get_logger
from biographer.llm.api_clients import ImageResponse, OpenAIClient
from biographer.llm.prompts import PromptLibrary

logger = get_logger("pipelines.panel_renderer")


@dataclass
class RenderSlot:
    """Outcome for one panel: an image or the error that prevented it."""
    ordinal: int
    text: str
    prompt: str
    image: Optional[ImageResponse] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.image is not None


def raise_on_failures(slots: Sequence[RenderSlot]) -> None:
    """Abort-all policy: any failed slot fails the whole render."""
    failed = [slot for slot in slots if not slot.ok]
    if failed:
        raise PanelRenderError(
            [slot.ordinal for slot in failed],
            [str(slot.error) for slot in failed],
        )


class PanelRenderer:
    """Renders panels concurrently through the image endpoint."""

    def __init__(self, client: OpenAIClient, size: str = "1024x1024", quality: str = "medium"):
        self.client = client
        self.size = size
        self.quality = quality

    def build_prompt(self, moment: str, style: Optional[str]) -> str:
        return PromptLibrary.panel_image(moment, map_animation_style(style))

    async def render(
        self,
        moments: List[str],
        style: Optional[str],
        reference_images: Optional[List[Optional[str]]] = None,
    ) -> List[RenderSlot]:
        """Render every moment; returns slots in input order."""
        references = list(reference_images or [])
        references += [None] * (len(moments) - len(references))

        slots = [
            RenderSlot(ordinal=i, text=moment, prompt=self.build_prompt(moment, style))
            for i, moment in enumerate(moments)
        ]

        logger.info(f"Generating {len(slots)} panel image(s) in parallel")
        results = await asyncio.gather(
            *(self._render_one(slot, references[slot.ordinal], len(slots)) for slot in slots),
            return_exceptions=True,
        )

        for slot, result in zip(slots, results):
            if isinstance(result, BaseException):
                slot.error = result
            else:
                slot.image = result

        succeeded = sum(1 for slot in slots if slot.ok)
        logger.info(f"Image generation settled: {succeeded}/{len(slots)} succeeded")
        return slots

    async def _render_one(self, slot: RenderSlot, reference: Optional[str], total: int) -> ImageResponse:
        logger.debug(f"Panel {slot.ordinal + 1}/{total}: {slot.text[:100]}")
        try:
            image = await self.client.generate_image(
                slot.prompt,
                size=self.size,
                quality=self.quality,
                reference_image=reference,
            )
        except Exception as e:
            logger.error(f"Image generation error for panel {slot.ordinal + 1}: {e}")
            raise
        logger.info(f"Panel {slot.ordinal + 1}/{total}: image generated")
        return image
