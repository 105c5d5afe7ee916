"""
Biographer Constants

Lifecycle statuses, illustration styles and table names.
"""

from enum import Enum
from typing import Dict, Optional

PROJECT_NAME = "AI Biographer"

# =============================================================================
# TABLES
# =============================================================================

STORIES_TABLE = "stories"
PANELS_TABLE = "cartoon_panels"
MEMORY_CAPTURES_TABLE = "memory_captures"


# =============================================================================
# STORY LIFECYCLE
# =============================================================================

class StoryStatus(str, Enum):
    """Lifecycle status of a memory record."""
    DRAFT = "draft"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


# A generation lease can only be taken from these states
GENERATION_START_STATES = (
    StoryStatus.DRAFT,
    StoryStatus.PENDING,
    StoryStatus.FAILED,
)

# Generation parameters may only be edited before a run or after a failed one
EDITABLE_STATES = GENERATION_START_STATES


# =============================================================================
# ILLUSTRATION STYLES
# =============================================================================

class AnimationStyle(str, Enum):
    """Illustration style tags accepted on a memory record."""
    CLASSIC_CARTOON = "classic_cartoon"
    ANIME = "anime"
    COMIC_BOOK = "comic_book"
    WATERCOLOR = "watercolor"
    PIXEL_ART = "pixel_art"
    REALISTIC = "realistic"


STYLE_DESCRIPTIONS: Dict[AnimationStyle, str] = {
    AnimationStyle.CLASSIC_CARTOON: (
        "colorful classic cartoon illustration, vibrant colors, bold outlines, "
        "expressive characters, suitable for all ages"
    ),
    AnimationStyle.ANIME: (
        "anime style illustration, cel-shaded, vibrant colors, expressive eyes, "
        "clean linework, detailed backgrounds"
    ),
    AnimationStyle.COMIC_BOOK: (
        "comic book style panel, bold ink outlines, halftone shading, dynamic "
        "composition, saturated colors"
    ),
    AnimationStyle.WATERCOLOR: (
        "soft watercolor painting, gentle washes of color, visible paper texture, "
        "warm nostalgic mood"
    ),
    AnimationStyle.PIXEL_ART: (
        "16-bit pixel art scene, limited retro palette, crisp pixels, charming "
        "video game aesthetic"
    ),
    AnimationStyle.REALISTIC: (
        "realistic digital painting, natural lighting, lifelike proportions, "
        "cinematic composition"
    ),
}

DEFAULT_ANIMATION_STYLE = AnimationStyle.CLASSIC_CARTOON


def map_animation_style(style: Optional[str]) -> str:
    """Map a style tag onto its prompt description.

    Unknown or empty tags resolve to the classic cartoon description.
    """
    if not style:
        return STYLE_DESCRIPTIONS[DEFAULT_ANIMATION_STYLE]
    try:
        return STYLE_DESCRIPTIONS[AnimationStyle(style)]
    except ValueError:
        return STYLE_DESCRIPTIONS[DEFAULT_ANIMATION_STYLE]
