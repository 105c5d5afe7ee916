"""
Stories API Routes

Create, read, edit and delete memory records, and attach a photo.
"""

import time
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from biographer.core.constants import EDITABLE_STATES
from biographer.core.exceptions import InvalidStoryStateError
from biographer.core.logging_config import get_logger
from biographer.models.story import StoryCreate, StoryRecord, StoryUpdate, StoryWithPanels
from biographer.storage.repository import StoryRepository
from biographer.api.deps import get_repository

router = APIRouter()
logger = get_logger("api.stories")

DEFAULT_PHOTO_EXTENSION = "jpg"


@router.post("", response_model=StoryRecord, status_code=201)
async def create_story(
    story: StoryCreate,
    repository: StoryRepository = Depends(get_repository),
):
    """Create a memory record, ready for generation."""
    record = await repository.create_story(story)
    logger.info(f"Created story {record.id} for user {record.user_id}")
    return record


@router.get("/{story_id}", response_model=StoryWithPanels)
async def get_story(
    story_id: str,
    repository: StoryRepository = Depends(get_repository),
):
    """A story with its panels in display order."""
    story = await repository.get_story(story_id)
    panels = await repository.list_panels(story_id)
    return StoryWithPanels(story=story, panels=panels)


@router.patch("/{story_id}", response_model=StoryRecord)
async def update_story(
    story_id: str,
    updates: StoryUpdate,
    repository: StoryRepository = Depends(get_repository),
):
    """Edit generation parameters. Not allowed while generating or once complete."""
    update_data = updates.model_dump(mode="json", exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No updates provided")

    story = await repository.get_story(story_id)
    if story.status not in EDITABLE_STATES:
        raise InvalidStoryStateError(
            f"Story '{story_id}' cannot be edited while '{story.status.value}'",
            {"story_id": story_id, "status": story.status.value},
        )

    return await repository.update_story(story_id, update_data)


@router.delete("/{story_id}")
async def delete_story(
    story_id: str,
    repository: StoryRepository = Depends(get_repository),
):
    """Delete a story and its panels."""
    await repository.delete_story(story_id)
    return {"success": True}


@router.post("/{story_id}/photo", response_model=StoryRecord)
async def upload_photo(
    story_id: str,
    file: UploadFile = File(...),
    repository: StoryRepository = Depends(get_repository),
):
    """Upload a reference photo and attach its public URL to the story."""
    story = await repository.get_story(story_id)

    extension = PurePosixPath(file.filename or "").suffix.lstrip(".").lower() or DEFAULT_PHOTO_EXTENSION
    path = f"{story.user_id}/{int(time.time() * 1000)}.{extension}"
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    url = await repository.upload_file(path, content, file.content_type or "application/octet-stream")
    logger.info(f"Attached photo {path} to story {story_id}")
    return await repository.update_story(story_id, {"photo_url": url})
