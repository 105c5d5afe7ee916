"""
Audio Transcription

Decodes base64 audio from the browser recorder and sends it to the speech
endpoint.
"""

import base64
import binascii

from biographer.core.exceptions import PipelineStageError
from biographer.core.logging_config import get_logger
from biographer.llm.api_clients import OpenAIClient

logger = get_logger("pipelines.transcription")


class AudioTranscriber:
    """Speech to text for recorded answers."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    async def transcribe(self, audio_b64: str) -> str:
        if not audio_b64:
            raise PipelineStageError("transcribe", "No audio data provided")

        try:
            audio = base64.b64decode(audio_b64, validate=False)
        except (binascii.Error, ValueError) as e:
            raise PipelineStageError("transcribe", f"Audio is not valid base64: {e}")
        if not audio:
            raise PipelineStageError("transcribe", "No audio data provided")

        logger.info(f"Transcribing {len(audio)} bytes of audio")
        text = await self.client.transcribe(audio, filename="audio.webm", content_type="audio/webm")
        logger.info(f"Transcription complete: {len(text)} chars")
        return text
