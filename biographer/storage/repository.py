"""
Story Repository

Supabase-backed persistence for memory records, their panels, memory captures
and uploaded files. Every failure is raised as a StorageError so pipelines can
abort before spending on provider calls.
"""

import asyncio
from typing import Optional, Dict, Any, List

from biographer.core.constants import (
    STORIES_TABLE,
    PANELS_TABLE,
    MEMORY_CAPTURES_TABLE,
    StoryStatus,
    GENERATION_START_STATES,
)
from biographer.core.exceptions import (
    BiographerError,
    StorageError,
    StoryNotFoundError,
    GenerationConflictError,
)
from biographer.core.logging_config import get_logger
from biographer.models.story import (
    StoryRecord,
    StoryCreate,
    PanelRecord,
    MemoryCapture,
)

logger = get_logger("storage.repository")


class StoryRepository:
    """Reads and writes stories, panels and memory captures."""

    def __init__(self, client: Any, bucket: str = "cartoons"):
        self._client = client
        self.bucket = bucket

    # =========================================================================
    # STORY OPERATIONS
    # =========================================================================

    async def get_story(self, story_id: str) -> StoryRecord:
        """Fetch a single memory record."""
        response = await self._execute(
            lambda: self._client.table(STORIES_TABLE)
                .select("*")
                .eq("id", story_id)
                .limit(1)
                .execute(),
            "read story",
            story_id,
        )
        if not response.data:
            raise StoryNotFoundError(story_id)
        return StoryRecord.model_validate(response.data[0])

    async def create_story(self, story: StoryCreate) -> StoryRecord:
        """Insert a new memory record in the pending state."""
        payload = story.model_dump(mode="json", exclude_none=True)
        payload["status"] = StoryStatus.PENDING.value
        payload["generation_attempt"] = 0

        response = await self._execute(
            lambda: self._client.table(STORIES_TABLE).insert(payload).execute(),
            "create story",
        )
        if not response.data:
            raise StorageError("Failed to create story")
        return StoryRecord.model_validate(response.data[0])

    async def update_story(self, story_id: str, updates: Dict[str, Any]) -> StoryRecord:
        """Apply a partial update to a memory record."""
        response = await self._execute(
            lambda: self._client.table(STORIES_TABLE)
                .update(updates)
                .eq("id", story_id)
                .execute(),
            "update story",
            story_id,
        )
        if not response.data:
            raise StoryNotFoundError(story_id)
        return StoryRecord.model_validate(response.data[0])

    async def delete_story(self, story_id: str) -> None:
        """Delete a memory record and its panels."""
        await self.delete_panels(story_id)
        response = await self._execute(
            lambda: self._client.table(STORIES_TABLE).delete().eq("id", story_id).execute(),
            "delete story",
            story_id,
        )
        if not response.data:
            raise StoryNotFoundError(story_id)
        logger.info(f"Deleted story {story_id}")

    async def set_status(
        self,
        story_id: str,
        status: StoryStatus,
        failure_reason: Optional[str] = None,
    ) -> None:
        """Move a record to a new lifecycle status."""
        await self._execute(
            lambda: self._client.table(STORIES_TABLE)
                .update({"status": status.value, "failure_reason": failure_reason})
                .eq("id", story_id)
                .execute(),
            "update story status",
            story_id,
        )
        logger.info(f"Story {story_id} -> {status.value}")

    async def acquire_generation_lease(self, story: StoryRecord) -> StoryRecord:
        """Move a record into processing if nobody else holds it.

        The update is conditional on the attempt counter the caller read and on
        a startable status, so two concurrent requests cannot both win.
        """
        next_attempt = story.generation_attempt + 1
        response = await self._execute(
            lambda: self._client.table(STORIES_TABLE)
                .update({
                    "status": StoryStatus.PROCESSING.value,
                    "generation_attempt": next_attempt,
                    "failure_reason": None,
                })
                .eq("id", story.id)
                .eq("generation_attempt", story.generation_attempt)
                .in_("status", [state.value for state in GENERATION_START_STATES])
                .execute(),
            "acquire generation lease",
            story.id,
        )
        if not response.data:
            raise GenerationConflictError(story.id, story.status.value)

        logger.info(f"Story {story.id}: generation attempt {next_attempt} started")
        return StoryRecord.model_validate(response.data[0])

    # =========================================================================
    # MEMORY CAPTURE OPERATIONS
    # =========================================================================

    async def get_memory_captures(self, capture_ids: List[str]) -> List[MemoryCapture]:
        """Fetch memory captures with their template question text."""
        if not capture_ids:
            return []

        response = await self._execute(
            lambda: self._client.table(MEMORY_CAPTURES_TABLE)
                .select("*, template_questions(question_text)")
                .in_("id", list(capture_ids))
                .execute(),
            "get memory captures",
        )

        captures = []
        for row in response.data or []:
            question = row.get("template_questions") or {}
            captures.append(MemoryCapture(
                id=row["id"],
                answer_text=row.get("answer_text") or "",
                question_text=question.get("question_text") if isinstance(question, dict) else None,
            ))
        return captures

    # =========================================================================
    # PANEL OPERATIONS
    # =========================================================================

    async def insert_panel(self, panel: PanelRecord) -> PanelRecord:
        """Insert one panel row."""
        payload = panel.model_dump(mode="json", exclude_none=True)
        response = await self._execute(
            lambda: self._client.table(PANELS_TABLE).insert(payload).execute(),
            "insert panel",
            panel.story_id,
        )
        if not response.data:
            raise StorageError(
                f"Panel insert returned no row for position {panel.order_index}",
                {"story_id": panel.story_id},
            )
        return PanelRecord.model_validate(response.data[0])

    async def list_panels(self, story_id: str) -> List[PanelRecord]:
        """Panels of a story in display order."""
        response = await self._execute(
            lambda: self._client.table(PANELS_TABLE)
                .select("*")
                .eq("story_id", story_id)
                .order("order_index")
                .execute(),
            "list panels",
            story_id,
        )
        return [PanelRecord.model_validate(row) for row in response.data or []]

    async def delete_panels(self, story_id: str) -> int:
        """Remove every panel of a story. Returns the number removed."""
        response = await self._execute(
            lambda: self._client.table(PANELS_TABLE).delete().eq("story_id", story_id).execute(),
            "delete panels",
            story_id,
        )
        removed = len(response.data or [])
        if removed:
            logger.info(f"Removed {removed} panel(s) from story {story_id}")
        return removed

    # =========================================================================
    # FILE STORAGE
    # =========================================================================

    async def upload_file(self, path: str, content: bytes, content_type: str) -> str:
        """Upload bytes to the bucket and return the public URL."""
        bucket = self._client.storage.from_(self.bucket)
        try:
            await asyncio.to_thread(bucket.upload, path, content, {"content-type": content_type})
            url = await asyncio.to_thread(bucket.get_public_url, path)
        except Exception as e:
            logger.error(f"Upload of {path} failed: {e}")
            raise StorageError(f"Failed to upload file: {e}", {"path": path}) from e

        logger.debug(f"Uploaded {len(content)} bytes to {self.bucket}/{path}")
        return url

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def _execute(self, query, action: str, story_id: Optional[str] = None):
        """Run a blocking supabase query in a worker thread."""
        try:
            return await asyncio.to_thread(query)
        except BiographerError:
            raise
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            details = {"story_id": story_id} if story_id else {}
            raise StorageError(f"Failed to {action}: {e}", details) from e
