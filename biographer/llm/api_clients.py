"""
Biographer API Clients

Async client for an OpenAI-compatible provider covering the three endpoints the
pipelines use:
- Chat completions (segmentation, polishing, questions, answer matching)
- Image generation and image edits (panel rendering)
- Audio transcription
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import httpx

from biographer.core.exceptions import APIError, QuotaExceededError
from biographer.core.logging_config import get_logger

logger = get_logger("llm.api_clients")

ChatMessage = Dict[str, str]

QUOTA_MARKERS = ("insufficient_quota", "quota", "billing", "credits")


# ============================================================================
#  RESPONSE TYPES
# ============================================================================

@dataclass
class TextResponse:
    """Response from a chat completion."""
    text: str
    model: str
    usage: Optional[Dict] = None
    raw_response: Optional[Dict] = None


@dataclass
class ImageResponse:
    """Response from an image generation request.

    Providers answer with either a fetchable URL or inline base64 bytes.
    """
    model: str
    url: Optional[str] = None
    b64_json: Optional[str] = None
    mime_type: str = "image/png"

    @property
    def data_uri(self) -> Optional[str]:
        if self.b64_json:
            return f"data:{self.mime_type};base64,{self.b64_json}"
        return None


# ============================================================================
#  CLIENT
# ============================================================================

class OpenAIClient:
    """Client for OpenAI-compatible chat, image and audio endpoints."""

    MODEL_DISPLAY_NAME = "OpenAI"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        text_model: str = "gpt-4o-mini",
        image_model: str = "gpt-image-1",
        transcription_model: str = "whisper-1",
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError(f"{self.__class__.__name__} requires an API key")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.text_model = text_model
        self.image_model = image_model
        self.transcription_model = transcription_model
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self, json_body: bool = True) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    # ------------------------------------------------------------------------
    #  Chat
    # ------------------------------------------------------------------------

    async def chat(self, messages: List[ChatMessage], model: Optional[str] = None) -> TextResponse:
        """Run one chat completion and return the first choice's text."""
        model = model or self.text_model
        body = {"model": model, "messages": list(messages)}

        async with self._http() as client:
            response = await self._send(
                client.post,
                "chat completion",
                f"{self.base_url}/chat/completions",
                headers=self._get_headers(),
                json=body,
            )
        self._raise_for_status(response, "chat completion")

        data = response.json()
        text = ""
        choices = data.get("choices", [])
        if choices:
            content = choices[0].get("message", {}).get("content", "")
            if isinstance(content, str):
                text = content
            elif isinstance(content, list):
                text = "".join(part.get("text", "") for part in content)

        return TextResponse(text=text, model=model, usage=data.get("usage"), raw_response=data)

    # ------------------------------------------------------------------------
    #  Images
    # ------------------------------------------------------------------------

    async def generate_image(
        self,
        prompt: str,
        size: str = "1024x1024",
        quality: str = "medium",
        reference_image: Optional[str] = None,
        model: Optional[str] = None,
    ) -> ImageResponse:
        """Generate one image.

        With a reference image (URL or data URI) the request goes to the edits
        endpoint so the provider can keep the subject's likeness.
        """
        model = model or self.image_model

        async with self._http() as client:
            if reference_image:
                image_bytes, mime_type = await self._load_reference(client, reference_image)
                response = await self._send(
                    client.post,
                    "image generation",
                    f"{self.base_url}/images/edits",
                    headers=self._get_headers(json_body=False),
                    data={
                        "model": model,
                        "prompt": prompt,
                        "n": "1",
                        "size": size,
                        "quality": quality,
                    },
                    files={"image": ("reference.png", image_bytes, mime_type)},
                )
            else:
                response = await self._send(
                    client.post,
                    "image generation",
                    f"{self.base_url}/images/generations",
                    headers=self._get_headers(),
                    json={
                        "model": model,
                        "prompt": prompt,
                        "n": 1,
                        "size": size,
                        "quality": quality,
                    },
                )
        self._raise_for_status(response, "image generation")

        data = response.json()
        items = data.get("data") or []
        if not items:
            raise APIError("Image response contained no data", response.status_code, response.text)

        image = items[0]
        if not image.get("b64_json") and not image.get("url"):
            raise APIError("Image response contained neither url nor b64_json", response.status_code, response.text)

        return ImageResponse(model=model, url=image.get("url"), b64_json=image.get("b64_json"))

    async def _load_reference(self, client: httpx.AsyncClient, reference: str) -> Tuple[bytes, str]:
        """Resolve a reference image URL or data URI into bytes."""
        if reference.startswith("data:"):
            header, _, payload = reference.partition(",")
            mime_type = header[5:].split(";")[0] or "image/png"
            return base64.b64decode(payload), mime_type

        response = await self._send(client.get, "reference image download", reference)
        self._raise_for_status(response, "reference image download")
        mime_type = response.headers.get("content-type", "image/png").split(";")[0]
        return response.content, mime_type

    # ------------------------------------------------------------------------
    #  Audio
    # ------------------------------------------------------------------------

    async def transcribe(
        self,
        audio: bytes,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
        model: Optional[str] = None,
    ) -> str:
        """Transcribe raw audio bytes to text."""
        model = model or self.transcription_model

        async with self._http() as client:
            response = await self._send(
                client.post,
                "transcription",
                f"{self.base_url}/audio/transcriptions",
                headers=self._get_headers(json_body=False),
                data={"model": model},
                files={"file": (filename, audio, content_type)},
            )
        self._raise_for_status(response, "transcription", quota_action=True)
        return response.json().get("text", "")

    # ------------------------------------------------------------------------
    #  Errors
    # ------------------------------------------------------------------------

    async def _send(self, method, action: str, url: str, **kwargs) -> httpx.Response:
        """Issue one request, reporting transport failures as APIError."""
        try:
            return await method(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{self.MODEL_DISPLAY_NAME} {action} failed: {type(e).__name__}: {e}")
            raise APIError(f"{action.capitalize()} request failed: {e}") from e

    def _raise_for_status(self, response: httpx.Response, action: str, quota_action: bool = False) -> None:
        """Raise for a non-2xx reply.

        Only calls made with quota_action report exhausted credits as
        QuotaExceededError; everything else is a plain APIError.
        """
        if response.is_success:
            return

        body = response.text
        logger.error(f"{self.MODEL_DISPLAY_NAME} {action} failed: HTTP {response.status_code}: {body[:500]}")

        if quota_action and (
            response.status_code == 402
            or (response.status_code == 429 and any(marker in body.lower() for marker in QUOTA_MARKERS))
        ):
            raise QuotaExceededError(
                f"{action.capitalize()} quota exceeded. Add credits or type manually.",
                response.status_code,
                body,
            )
        raise APIError(f"HTTP {response.status_code}: {body}", response.status_code, body)
