"""
API Dependencies

Providers for the repository, the provider client and the pipelines. Tests
swap these through `app.dependency_overrides`.
"""

from fastapi import Depends
from slowapi import Limiter
from slowapi.util import get_remote_address

from biographer.core.config import settings
from biographer.core.exceptions import ConfigurationError
from biographer.core.logging_config import get_logger
from biographer.core.supabase import get_supabase_admin
from biographer.llm.api_clients import OpenAIClient
from biographer.llm.structured import StructuredCompletion
from biographer.pipelines import (
    AnswerMatcher,
    AudioTranscriber,
    CartoonPipeline,
    NarrativePolisher,
    PanelRenderer,
    PanelWriter,
    QuestionGenerator,
    SceneSegmenter,
    StoryAggregator,
    TranscriptFilter,
    TranscriptNormalizer,
)
from biographer.storage.repository import StoryRepository

logger = get_logger("api.deps")

# Rate limiter for provider-heavy endpoints
limiter = Limiter(key_func=get_remote_address)


def get_repository() -> StoryRepository:
    """Repository bound to the service-role Supabase client."""
    return StoryRepository(get_supabase_admin(), bucket=settings.storage_bucket)


def get_openai_client() -> OpenAIClient:
    """Provider client built from settings."""
    if not settings.openai_api_key:
        raise ConfigurationError("OPENAI_API_KEY is not configured")
    return OpenAIClient(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        text_model=settings.text_model,
        image_model=settings.image_model,
        transcription_model=settings.transcription_model,
        timeout=settings.http_timeout_seconds,
    )


def get_completion(client: OpenAIClient = Depends(get_openai_client)) -> StructuredCompletion:
    return StructuredCompletion(client)


def get_cartoon_pipeline(
    repository: StoryRepository = Depends(get_repository),
    client: OpenAIClient = Depends(get_openai_client),
    completion: StructuredCompletion = Depends(get_completion),
) -> CartoonPipeline:
    """A fresh pipeline per request; pipelines hold per-run state."""
    return CartoonPipeline(
        repository=repository,
        aggregator=StoryAggregator(repository),
        normalizer=TranscriptNormalizer(client),
        segmenter=SceneSegmenter(completion),
        polisher=NarrativePolisher(completion),
        renderer=PanelRenderer(client, size=settings.image_size, quality=settings.image_quality),
        writer=PanelWriter(repository, upload_images=settings.upload_panel_images),
        default_panel_count=settings.default_panel_count,
        max_panel_count=settings.max_panel_count,
        polish_scenes=settings.polish_scenes,
    )


def get_question_generator(
    repository: StoryRepository = Depends(get_repository),
    completion: StructuredCompletion = Depends(get_completion),
) -> QuestionGenerator:
    return QuestionGenerator(repository, completion)


def get_answer_matcher(completion: StructuredCompletion = Depends(get_completion)) -> AnswerMatcher:
    return AnswerMatcher(completion)


def get_transcript_filter(client: OpenAIClient = Depends(get_openai_client)) -> TranscriptFilter:
    return TranscriptFilter(client)


def get_transcriber(client: OpenAIClient = Depends(get_openai_client)) -> AudioTranscriber:
    return AudioTranscriber(client)
