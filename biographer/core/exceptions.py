"""
Biographer Custom Exceptions

Exception classes raised by storage, providers and pipelines. The API layer
maps them onto HTTP status codes.
"""

from typing import List, Optional


class BiographerError(Exception):
    """Base exception for all Biographer errors."""

    status_code = 500

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(BiographerError):
    """Raised when a required setting is missing or invalid."""
    pass


# =============================================================================
# STORAGE ERRORS
# =============================================================================

class StorageError(BiographerError):
    """Raised when a read or write against the persistent store fails."""
    pass


class StoryNotFoundError(StorageError):
    """Raised when a memory record does not exist."""

    status_code = 404

    def __init__(self, story_id: str):
        super().__init__(f"Story not found: '{story_id}'", {"story_id": story_id})


class GenerationConflictError(BiographerError):
    """Raised when a generation lease cannot be acquired for a record."""

    status_code = 409

    def __init__(self, story_id: str, status: Optional[str] = None):
        message = f"Story '{story_id}' cannot start a new generation"
        if status:
            message += f" while '{status}'"
        super().__init__(message, {"story_id": story_id, "status": status})


class InvalidStoryStateError(BiographerError):
    """Raised when a record edit is not allowed in its current status."""

    status_code = 409


# =============================================================================
# PIPELINE ERRORS
# =============================================================================

class PipelineError(BiographerError):
    """Base exception for pipeline errors."""
    pass


class PipelineStageError(PipelineError):
    """Raised when a specific pipeline stage fails."""

    def __init__(self, stage_name: str, reason: str):
        message = f"Pipeline stage '{stage_name}' failed: {reason}"
        super().__init__(message, {"stage": stage_name, "reason": reason})


class PanelRenderError(PipelineError):
    """Raised when one or more concurrent panel renders fail."""

    def __init__(self, failed_ordinals: List[int], reasons: List[str]):
        self.failed_ordinals = list(failed_ordinals)
        panels = ", ".join(str(ordinal + 1) for ordinal in self.failed_ordinals)
        message = f"Failed to generate image for panel {panels}: {reasons[0] if reasons else 'unknown error'}"
        super().__init__(message)


# =============================================================================
# PROVIDER ERRORS
# =============================================================================

class LLMError(BiographerError):
    """Base exception for model provider errors."""
    pass


class APIError(LLMError):
    """Raised when a provider answers with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[str] = None):
        super().__init__(message)
        self.provider_status = status_code
        self.response = response


class QuotaExceededError(APIError):
    """Raised when the provider reports exhausted credits or quota."""

    status_code = 402
    code = "quota_exceeded"
