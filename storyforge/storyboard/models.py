"""
Storyboard Data Model

Panels, character profiles and the analysis result shared by the store, the
prompt composer and the generation orchestrator.

Panels are immutable: every change produces a new Panel through ``evolve`` so
that history snapshots can hold references to old collections without copying.
"""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple


class Transition(Enum):
    """Transition from a panel into the next one."""
    NONE = "None"
    CUT = "Cut"
    FADE = "Fade"
    DISSOLVE = "Dissolve"
    WIPE = "Wipe"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Transition":
        if not value:
            return cls.NONE
        for transition in cls:
            if value.lower() in (transition.value.lower(), transition.name.lower()):
                return transition
        return cls.NONE


def new_panel_id() -> str:
    return f"panel-{uuid.uuid4().hex}"


# Fields that describe in-flight work rather than panel content
TRANSIENT_FIELDS: Tuple[str, ...] = (
    "is_generating_image",
    "is_generating_video",
    "is_playing_audio",
)


@dataclass
class CharacterProfile:
    """A named visual description used to keep a character consistent."""
    name: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CharacterProfile":
        return cls(name=str(data.get("name", "")), description=str(data.get("description", "")))


@dataclass(frozen=True)
class Panel:
    """One storyboard unit: a shot with its description, dialogue and media."""
    id: str
    panel_number: int
    visual_description: str
    dialogue: str = ""
    image_prompt: Optional[str] = None
    shot_type: Optional[str] = None
    transition: Transition = Transition.NONE
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    is_generating_image: bool = False
    is_generating_video: bool = False
    is_playing_audio: bool = False

    def __post_init__(self):
        if self.image_url is None and self.video_url is not None:
            raise ValueError(f"Panel {self.id} has a video without a source image")

    def evolve(self, **changes: Any) -> "Panel":
        """Return a copy with ``changes`` applied.

        Clearing the image also clears any clip derived from it.
        """
        if "image_url" in changes and changes["image_url"] is None:
            changes.setdefault("video_url", None)
        return replace(self, **changes)

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    @property
    def is_busy(self) -> bool:
        return any(getattr(self, name) for name in TRANSIENT_FIELDS)

    def activity(self) -> Dict[str, bool]:
        return {name: getattr(self, name) for name in TRANSIENT_FIELDS}

    def content(self) -> "Panel":
        """The panel with every transient flag cleared."""
        if not self.is_busy:
            return self
        return replace(self, **{name: False for name in TRANSIENT_FIELDS})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "panelNumber": self.panel_number,
            "visualDescription": self.visual_description,
            "dialogue": self.dialogue,
            "imagePrompt": self.image_prompt,
            "shotType": self.shot_type,
            "transition": self.transition.value,
            "imageUrl": self.image_url,
            "videoUrl": self.video_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Panel":
        """Build a panel from camelCase or snake_case keys. Flags always start cleared.

        A missing id gets a fresh one so hand-edited files cannot collide.
        """
        def pick(*keys, default=None):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return default

        image_url = pick("imageUrl", "image_url")
        return cls(
            id=str(pick("id") or new_panel_id()),
            panel_number=int(pick("panelNumber", "panel_number", default=0)),
            visual_description=pick("visualDescription", "visual_description", default=""),
            dialogue=pick("dialogue", default=""),
            image_prompt=pick("imagePrompt", "image_prompt"),
            shot_type=pick("shotType", "shot_type"),
            transition=Transition.parse(pick("transition")),
            image_url=image_url,
            video_url=pick("videoUrl", "video_url") if image_url else None,
        )


PanelCollection = Tuple[Panel, ...]


def sort_panels(panels: Iterable[Panel]) -> PanelCollection:
    """Order panels by panel number, keeping input order for ties."""
    return tuple(sorted(panels, key=lambda p: p.panel_number))


def find_panel(panels: Iterable[Panel], panel_id: str) -> Optional[Panel]:
    for panel in panels:
        if panel.id == panel_id:
            return panel
    return None


def replace_panel(panels: Iterable[Panel], panel_id: str, **changes: Any) -> PanelCollection:
    """Return a new collection with the panel ``panel_id`` evolved by ``changes``.

    Panels that are not present are left alone; the result then equals the input.
    """
    return tuple(p.evolve(**changes) if p.id == panel_id else p for p in panels)


@dataclass
class AnalysisResult:
    """Shaped output of script analysis."""
    panels: PanelCollection = field(default_factory=tuple)
    characters: List[CharacterProfile] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.panels and not self.characters

    @classmethod
    def empty(cls) -> "AnalysisResult":
        return cls()
