"""
StoryForge Constants

Global constants used throughout the storyboarding pipeline.
"""

from enum import Enum
from typing import Dict, Tuple

# =============================================================================
# VERSION INFO
# =============================================================================
VERSION = "1.0.0"
PROJECT_NAME = "StoryForge"

# =============================================================================
# VISUAL STYLE CONSTANTS
# =============================================================================

class VisualStyle(Enum):
    """Art styles offered for panel generation."""
    CINEMATIC = "Realistic Cinematic"
    SKETCH = "Pencil Sketch"
    NOIR = "Film Noir"
    ANIME = "Anime Style"
    RENDER_3D = "3D Render"
    WATERCOLOR = "Watercolor"
    CYBERPUNK = "Cyberpunk"

    @classmethod
    def parse(cls, value: str) -> "VisualStyle":
        """Accept either the display value or the member name."""
        for style in cls:
            if value in (style.value, style.name) or value.lower() == style.value.lower():
                return style
        raise ValueError(f"Unknown visual style: {value}")


class AspectRatio(Enum):
    """Frame aspect ratios."""
    WIDESCREEN = "16:9"
    VERTICAL = "9:16"
    TV = "4:3"
    SQUARE = "1:1"


class ImageResolution(Enum):
    """Pro-tier output sizes. Absent resolution selects the fast model."""
    R1K = "1K"
    R2K = "2K"
    R4K = "4K"


# Veo only renders these two ratios; everything else maps to widescreen
VIDEO_ASPECT_RATIOS: Tuple[str, ...] = ("16:9", "9:16")
ANIMATIC_ASPECT_RATIO = "16:9"

# =============================================================================
# MODEL IDS
# =============================================================================

DEFAULT_MODELS: Dict[str, str] = {
    "analysis": "gemini-3-flash-preview",
    "image_fast": "gemini-2.5-flash-image",
    "image_pro": "gemini-3-pro-image-preview",
    "edit": "gemini-2.5-flash-image",
    "video": "veo-3.1-fast-generate-preview",
    "animatic": "veo-3.1-generate-preview",
    "speech": "gemini-2.5-flash-preview-tts",
}

DEFAULT_VOICE = "Fenrir"
VIDEO_RESOLUTION = "720p"

# =============================================================================
# GENERATION CONSTANTS
# =============================================================================

# Provider message marking an invalid or unselected billing key
CREDENTIAL_ERROR_SIGNATURE = "Requested entity was not found"

VIDEO_POLL_INTERVAL_SECONDS = 5.0
VIDEO_MAX_WAIT_SECONDS = 900.0

OUTPAINT_EXPANSION_FACTOR = 0.5

NARRATION_SAMPLE_RATE = 24000
PCM16_SCALE = 32768.0

ANIMATIC_MAX_REFERENCES = 3
ANIMATIC_MIN_REFERENCES = 2

DEFAULT_BATCH_CONCURRENCY = 4

QUALITY_SUFFIX = "High fidelity, cinematic lighting, detailed texture, 8k resolution."
