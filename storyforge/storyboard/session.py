"""
Storyboard Session

Explicit state container for one editing session: the panel store, the
character registry, the current generation settings and the credentials used
for provider calls. Orchestration code receives the session instead of
reaching for module-level state.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from storyforge.core.constants import AspectRatio, ImageResolution, VisualStyle
from storyforge.core.config import GenerationConfig
from storyforge.core.exceptions import InvalidConfigError
from storyforge.core.logging_config import get_logger
from storyforge.llm.capability import CredentialContext
from storyforge.storyboard.characters import CharacterRegistry
from storyforge.storyboard.history import PanelStore
from storyforge.storyboard.models import AnalysisResult, CharacterProfile, Panel, Transition
from storyforge.utils.file_utils import read_json, write_json

logger = get_logger("storyboard.session")

SESSION_FORMAT_VERSION = 1


@dataclass
class StoryboardSession:
    """Everything an orchestrator needs to read and write for one storyboard."""
    credentials: CredentialContext
    store: PanelStore = field(default_factory=PanelStore)
    registry: CharacterRegistry = field(default_factory=CharacterRegistry)
    style: VisualStyle = VisualStyle.CINEMATIC
    aspect_ratio: AspectRatio = AspectRatio.WIDESCREEN
    resolution: Optional[ImageResolution] = None
    animatic_url: Optional[str] = None

    @classmethod
    def from_config(cls, credentials: CredentialContext, generation: GenerationConfig) -> "StoryboardSession":
        return cls(
            credentials=credentials,
            style=generation.style,
            aspect_ratio=generation.aspect_ratio,
            resolution=generation.resolution,
        )

    @property
    def panels(self):
        return self.store.panels

    @property
    def characters(self):
        return self.registry.characters

    def load_analysis(self, result: AnalysisResult) -> None:
        """Replace panels and characters; a fresh analysis is not undoable."""
        self.store.load(result.panels)
        self.registry.replace_all(result.characters)
        self.animatic_url = None

    def update_character(self, index: int, description: str) -> None:
        self.registry.update_description(index, description)

    def set_transition(self, panel_id: str, transition: Union[Transition, str]) -> bool:
        self.store.require_panel(panel_id)
        if not isinstance(transition, Transition):
            transition = Transition.parse(transition)
        return self.store.update_panel(panel_id, transition=transition)

    def update_dialogue(self, panel_id: str, dialogue: str) -> bool:
        self.store.require_panel(panel_id)
        return self.store.update_panel(panel_id, dialogue=dialogue)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serializable snapshot of content; history and in-flight flags are not saved."""
        return {
            "version": SESSION_FORMAT_VERSION,
            "style": self.style.value,
            "aspectRatio": self.aspect_ratio.value,
            "resolution": self.resolution.value if self.resolution else None,
            "characters": self.registry.to_list(),
            "panels": [p.to_dict() for p in self.store.content],
            "animaticUrl": self.animatic_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], credentials: CredentialContext) -> "StoryboardSession":
        resolution = data.get("resolution")
        try:
            session = cls(
                credentials=credentials,
                style=VisualStyle.parse(data.get("style", VisualStyle.CINEMATIC.value)),
                aspect_ratio=AspectRatio(data.get("aspectRatio", AspectRatio.WIDESCREEN.value)),
                resolution=ImageResolution(resolution) if resolution else None,
            )
        except ValueError as e:
            raise InvalidConfigError(f"Invalid storyboard settings: {e}")
        session.load_analysis(AnalysisResult(
            panels=tuple(Panel.from_dict(p) for p in data.get("panels", [])),
            characters=[CharacterProfile.from_dict(c) for c in data.get("characters", [])],
        ))
        session.animatic_url = data.get("animaticUrl")
        return session

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        write_json(path, self.to_dict())
        logger.info(f"Saved storyboard with {len(self.store)} panel(s) to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path], credentials: CredentialContext) -> "StoryboardSession":
        return cls.from_dict(read_json(path), credentials)
