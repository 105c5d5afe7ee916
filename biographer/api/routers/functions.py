"""Function endpoints: cartoon generation and the helpers the story pages call."""

from fastapi import APIRouter, Depends, Request

from biographer.core.config import settings
from biographer.core.logging_config import get_logger
from biographer.models.functions import (
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
from biographer.pipelines import (
    AnswerMatcher,
    AudioTranscriber,
    CartoonPipeline,
    QuestionGenerator,
    TranscriptFilter,
)
from biographer.api.deps import (
    limiter,
    get_cartoon_pipeline,
    get_question_generator,
    get_answer_matcher,
    get_transcript_filter,
    get_transcriber,
)

logger = get_logger("api.functions")

router = APIRouter()


@router.post("/generate-cartoon", response_model=GenerateCartoonResponse)
@limiter.limit(settings.generate_rate_limit)
async def generate_cartoon(
    request: Request,
    body: GenerateCartoonRequest,
    pipeline: CartoonPipeline = Depends(get_cartoon_pipeline),
):
    """Generate and store the panels for a story. Returns once every panel is saved."""
    logger.info(f"Generate request for story {body.story_id} (advanced={body.advanced_mode})")
    outcome = await pipeline.generate(body.story_id, advanced_mode=body.advanced_mode)
    return GenerateCartoonResponse(panels=len(outcome.panels))


@router.post("/analyze-story", response_model=AnalyzeStoryResponse)
async def analyze_story(
    body: AnalyzeStoryRequest,
    generator: QuestionGenerator = Depends(get_question_generator),
):
    """Suggest clarifying questions for a story."""
    questions = await generator.generate(body.story_id)
    return AnalyzeStoryResponse(questions=questions)


@router.post("/analyze-answers", response_model=AnalyzeAnswersResponse)
async def analyze_answers(
    body: AnalyzeAnswersRequest,
    matcher: AnswerMatcher = Depends(get_answer_matcher),
):
    """Match a spoken transcript to the question list."""
    answers = await matcher.match(body.transcription, body.questions)
    return AnalyzeAnswersResponse(answers=answers)


@router.post("/filter-conversation", response_model=FilterConversationResponse)
async def filter_conversation(
    body: FilterConversationRequest,
    story_filter: TranscriptFilter = Depends(get_transcript_filter),
):
    """Condense a conversation into a story prompt."""
    story_prompt = await story_filter.filter(body.conversation_text)
    return FilterConversationResponse(story_prompt=story_prompt)


@router.post("/transcribe-audio", response_model=TranscribeAudioResponse)
async def transcribe_audio(
    body: TranscribeAudioRequest,
    transcriber: AudioTranscriber = Depends(get_transcriber),
):
    """Transcribe base64 audio recorded in the browser."""
    text = await transcriber.transcribe(body.audio)
    return TranscribeAudioResponse(text=text)
