"""
Tests for Constants and Exceptions

Tests for biographer/core/constants.py and biographer/core/exceptions.py
"""

import pytest

from biographer.core.constants import (
    AnimationStyle,
    StoryStatus,
    STYLE_DESCRIPTIONS,
    GENERATION_START_STATES,
    map_animation_style,
)
from biographer.core.exceptions import (
    BiographerError,
    StoryNotFoundError,
    GenerationConflictError,
    PanelRenderError,
    QuotaExceededError,
    APIError,
)


class TestStyleMapping:
    """Tests for style tag resolution."""

    @pytest.mark.parametrize("style", [style.value for style in AnimationStyle])
    def test_known_styles(self, style):
        assert map_animation_style(style) == STYLE_DESCRIPTIONS[AnimationStyle(style)]

    @pytest.mark.parametrize("style", [None, "", "oil_painting"])
    def test_unknown_styles_use_classic_cartoon(self, style):
        assert map_animation_style(style) == STYLE_DESCRIPTIONS[AnimationStyle.CLASSIC_CARTOON]


class TestStoryStatus:
    """Tests for the record lifecycle."""

    def test_failed_state_exists(self):
        assert StoryStatus("failed") is StoryStatus.FAILED

    def test_generation_start_states(self):
        assert StoryStatus.FAILED in GENERATION_START_STATES
        assert StoryStatus.PROCESSING not in GENERATION_START_STATES
        assert StoryStatus.COMPLETE not in GENERATION_START_STATES


class TestExceptions:
    """Tests for exception status codes and messages."""

    def test_status_codes(self):
        assert BiographerError("boom").status_code == 500
        assert StoryNotFoundError("s1").status_code == 404
        assert GenerationConflictError("s1").status_code == 409
        assert QuotaExceededError("no credits", 429).status_code == 402

    def test_details_in_str(self):
        error = BiographerError("boom", {"story_id": "s1"})
        assert str(error) == "boom | Details: {'story_id': 's1'}"
        assert error.message == "boom"

    def test_quota_error_keeps_provider_status(self):
        error = QuotaExceededError("no credits", 429, "insufficient_quota")
        assert isinstance(error, APIError)
        assert error.provider_status == 429
        assert error.code == "quota_exceeded"

    def test_panel_render_error_lists_panels(self):
        error = PanelRenderError([1], ["HTTP 500: upstream"])
        assert error.failed_ordinals == [1]
        assert str(error) == "Failed to generate image for panel 2: HTTP 500: upstream"
