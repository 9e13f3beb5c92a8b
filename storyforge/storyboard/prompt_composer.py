"""
Prompt Composer

Pure functions turning panel records and the character registry into
generation instructions. Nothing here touches the network or the store.

Prompt Hierarchy (image):
    [Style Specification] + [Technical Scene Description] + [Technical Specifications]

Character consistency:
    A panel's cached ``image_prompt`` is written once at analysis time. When a
    user later edits a character's description the cached text goes stale, so
    for every registry character named in the prompt a parenthetical with the
    registry's current description is appended:

        "... Maya crosses the street (Maya is a 30yo courier with a red scarf)"
"""

from typing import Iterable, List, Optional, Sequence, Union

from storyforge.core.constants import (
    ANIMATIC_MAX_REFERENCES,
    ANIMATIC_MIN_REFERENCES,
    QUALITY_SUFFIX,
    VisualStyle,
)
from storyforge.storyboard.models import CharacterProfile, Panel, Transition, sort_panels

StyleLike = Union[VisualStyle, str]

ANIMATIC_OPENING = "A continuous cinematic video sequence."
ANIMATIC_CLOSING = (
    "Smooth motion, high quality render, consistent character appearance between shots."
)


def _style_name(style: StyleLike) -> str:
    return style.value if isinstance(style, VisualStyle) else str(style)


def _mentions(text: Optional[str], character: CharacterProfile) -> bool:
    return bool(character.name) and bool(text) and character.name in text


def reinforce_characters(prompt: str, characters: Iterable[CharacterProfile]) -> str:
    """Append ``(name is description)`` for every character named in ``prompt``.

    Matching is done against the prompt as it was before any reinforcement so
    that one character's description cannot pull in another.
    """
    additions = [
        f" ({c.name} is {c.description})"
        for c in characters
        if _mentions(prompt, c)
    ]
    return prompt + "".join(additions)


def build_scene_prompt(panel: Panel, characters: Iterable[CharacterProfile]) -> str:
    """Construct a scene description for panels without a cached prompt."""
    context = "".join(
        f"{c.name} is {c.description}. "
        for c in characters
        if _mentions(panel.visual_description, c) or _mentions(panel.dialogue, c)
    )
    parts = []
    if panel.shot_type:
        parts.append(f"Shot Type: {panel.shot_type}.")
    parts.append(f"Scene: {panel.visual_description}.")
    parts.append(f"Characters: {context}".rstrip())
    return " ".join(parts)


def compose_image_prompt(
    panel: Panel,
    style: StyleLike,
    characters: Sequence[CharacterProfile],
) -> str:
    """
    Build the final image generation instruction for a panel.

    Args:
        panel: Panel to draw
        style: Art style (enum member or free text)
        characters: Current character registry contents

    Returns:
        The wrapped prompt. With no character matches the scene text is used
        verbatim inside the style/quality wrapper.
    """
    if panel.image_prompt:
        scene = reinforce_characters(panel.image_prompt, characters)
    else:
        scene = build_scene_prompt(panel, characters)

    return (
        "[Style Specification]\n"
        f"Art Style: {_style_name(style)}\n"
        "\n"
        "[Technical Scene Description]\n"
        f"{scene}\n"
        "\n"
        "[Technical Specifications]\n"
        f"{QUALITY_SUFFIX}"
    )


def compose_edit_prompt(instruction: str) -> str:
    return instruction.strip()


def compose_outpaint_prompt(direction) -> str:
    """Infill instruction for a canvas expanded toward ``direction``."""
    name = getattr(direction, "value", direction)
    return (
        f"Outpainting task: The provided image has empty space added to the {name}. "
        "Seamlessly fill in this empty space to expand the scene. "
        "Match the existing art style, lighting, and context perfectly. "
        "Do not change the original content, only extend it."
    )


def select_animatic_panels(
    panels: Iterable[Panel],
    limit: int = ANIMATIC_MAX_REFERENCES,
) -> Optional[List[Panel]]:
    """
    Pick the reference panels for an animatic.

    Only the first ``limit`` panels in storyboard order are eligible; those
    with an image are used in order. Fewer than two qualifying panels means no
    animatic can be built and None is returned.
    """
    window = sort_panels(panels)[:limit]
    chosen = [p for p in window if p.has_image]
    if len(chosen) < ANIMATIC_MIN_REFERENCES:
        return None
    return chosen


def compose_animatic_prompt(
    panels: Sequence[Panel],
    characters: Sequence[CharacterProfile] = (),
) -> str:
    """Stitch per-panel summaries and transitions into one video description."""
    parts = [ANIMATIC_OPENING]

    character_context = ". ".join(f"{c.name}: {c.description}" for c in characters)
    if character_context:
        parts.append(f"Characters details: {character_context}.")

    for index, panel in enumerate(panels):
        parts.append(f"Scene {index + 1}: {panel.visual_description}.")
        is_last = index == len(panels) - 1
        if panel.transition is not Transition.NONE and not is_last:
            parts.append(f"Transition to next scene using {panel.transition.value} effect.")

    parts.append(ANIMATIC_CLOSING)
    return " ".join(parts)
