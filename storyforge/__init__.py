"""
StoryForge - AI-Assisted Storyboarding Core

Turns a screenplay into an ordered, editable storyboard: panels with undoable
history, a character visual dictionary, consistent image prompts, and
orchestration of image, video, animatic and narration generation.

Version: 1.0.0
"""

__version__ = "1.0.0"
__project__ = "StoryForge"

from pathlib import Path

# Load environment variables early - before any other imports that might need them
from storyforge.core.env_loader import ensure_env_loaded
ensure_env_loaded()

# Package root directory
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent

__all__ = [
    "__version__",
    "__project__",
    "PACKAGE_ROOT",
    "PROJECT_ROOT",
]
