"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

import io
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Dict, Any
from unittest.mock import AsyncMock

from PIL import Image

from storyforge.core.config import StoryforgeConfig
from storyforge.llm.capability import CredentialContext
from storyforge.storyboard.media import to_data_uri
from storyforge.storyboard.models import CharacterProfile, Panel, Transition
from storyforge.storyboard.narration import NullAudioSink
from storyforge.storyboard.session import StoryboardSession


def make_png(width: int = 4, height: int = 2, color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid-color RGBA PNG."""
    buffer = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_panel(panel_id: str, number: int, **kwargs) -> Panel:
    kwargs.setdefault("visual_description", f"Scene {number}")
    return Panel(id=panel_id, panel_number=number, **kwargs)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def credentials() -> CredentialContext:
    return CredentialContext(api_key="test-key-1234")


@pytest.fixture
def png_uri() -> str:
    return to_data_uri(make_png())


@pytest.fixture
def sample_script() -> str:
    """Short screenplay used by analyzer and import tests."""
    return (
        "INT. DINER - NIGHT\n\n"
        "MAYA sits alone, stirring cold coffee.\n\n"
        "MAYA\n(quietly)\nHe said he'd come back.\n"
    )


@pytest.fixture
def sample_analysis() -> Dict[str, Any]:
    """Raw analysis payload as the model returns it."""
    return {
        "characters": [
            {"name": "Maya", "description": "a 30yo courier with a red scarf"},
            {"name": "Leo", "description": "an older cook with a grey beard"},
        ],
        "panels": [
            {
                "panelNumber": 2,
                "visualDescription": "Leo wipes the counter",
                "imagePrompt": "Medium shot of Leo behind the counter",
                "shotType": "Medium",
                "dialogue": "",
            },
            {
                "panelNumber": 1,
                "visualDescription": "Maya stirs her coffee",
                "imagePrompt": "Close-up of Maya at a booth",
                "shotType": "Close-up",
                "dialogue": "He said he'd come back.",
            },
        ],
    }


@pytest.fixture
def sample_characters() -> list:
    return [
        CharacterProfile("Maya", "a 30yo courier with a red scarf"),
        CharacterProfile("Leo", "an older cook with a grey beard"),
    ]


@pytest.fixture
def sample_panels() -> tuple:
    return (
        make_panel("p1", 1, image_prompt="Close-up of Maya at a booth", dialogue="He said he'd come back."),
        make_panel("p2", 2, transition=Transition.FADE),
        make_panel("p3", 3),
    )


@pytest.fixture
def fast_config() -> StoryforgeConfig:
    """Default configuration with a short poll interval."""
    config = StoryforgeConfig()
    config.generation.poll_interval_seconds = 0.01
    return config


@pytest.fixture
def fake_capability(png_uri):
    """AsyncMock standing in for GenerationCapability."""
    capability = AsyncMock()
    capability.analyze_script.return_value = None
    capability.generate_image.return_value = png_uri
    capability.edit_image.return_value = png_uri
    capability.animate_image.return_value = "https://video.example/clip.mp4?key=test-key-1234"
    capability.assemble_animatic.return_value = "https://video.example/animatic.mp4?key=test-key-1234"
    capability.synthesize_speech.return_value = b"\x00\x00\xff\x7f\x00\x80"
    return capability


@pytest.fixture
def session(credentials, sample_panels, sample_characters) -> StoryboardSession:
    session = StoryboardSession(credentials=credentials)
    session.store.load(sample_panels)
    session.registry.replace_all(sample_characters)
    return session


@pytest.fixture
def audio_sink() -> NullAudioSink:
    return NullAudioSink()


@pytest.fixture
def png_factory():
    """Return the PNG encoder helper."""
    return make_png


@pytest.fixture
def panel_factory():
    """Return the Panel builder helper."""
    return make_panel
