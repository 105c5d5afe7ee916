"""
Panel Writer

Persists rendered panels one row at a time in ordinal order.
"""

import base64
from typing import List, Sequence

from biographer.core.logging_config import get_logger
from biographer.models.story import PanelRecord
from biographer.pipelines.panel_renderer import RenderSlot
from biographer.storage.repository import StoryRepository

logger = get_logger("pipelines.panel_writer")


class PanelWriter:
    """Writes panel rows; no transaction groups the inserts."""

    def __init__(self, repository: StoryRepository, upload_images: bool = False):
        self.repository = repository
        self.upload_images = upload_images

    async def write(self, story_id: str, slots: Sequence[RenderSlot]) -> List[PanelRecord]:
        panels = []
        for slot in sorted(slots, key=lambda s: s.ordinal):
            image_url = await self._resolve_image(story_id, slot)
            panel = await self.repository.insert_panel(PanelRecord(
                story_id=story_id,
                order_index=slot.ordinal,
                scene_text=slot.text,
                image_url=image_url,
            ))
            panels.append(panel)
            logger.debug(f"Story {story_id}: saved panel {slot.ordinal + 1}/{len(slots)}")

        logger.info(f"Story {story_id}: saved {len(panels)} panel(s)")
        return panels

    async def _resolve_image(self, story_id: str, slot: RenderSlot) -> str:
        image = slot.image
        if image.url:
            return image.url
        if self.upload_images:
            path = f"panels/{story_id}/{slot.ordinal}.png"
            return await self.repository.upload_file(path, base64.b64decode(image.b64_json), image.mime_type)
        return image.data_uri
