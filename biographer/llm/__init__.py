"""
Model Provider Layer
"""

from .api_clients import OpenAIClient, TextResponse, ImageResponse
from .prompts import PromptLibrary
from .structured import StructuredCompletion, StructuredResult, parse_json_payload

__all__ = [
    "OpenAIClient",
    "TextResponse",
    "ImageResponse",
    "PromptLibrary",
    "StructuredCompletion",
    "StructuredResult",
    "parse_json_payload",
]
