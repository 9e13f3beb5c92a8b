"""
Script Analyzer bridge

Turns raw script-analysis output into panels and character profiles and seeds
a session with them. Model output is validated with pydantic; anything that
does not parse or validate becomes an empty result instead of an exception.
Only transport failures from the capability propagate.
"""

import json
from typing import TYPE_CHECKING, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from storyforge.core.logging_config import get_logger
from storyforge.storyboard.models import (
    AnalysisResult,
    CharacterProfile,
    Panel,
    Transition,
    new_panel_id,
    sort_panels,
)

if TYPE_CHECKING:
    from storyforge.llm.capability import GenerationCapability
    from storyforge.storyboard.session import StoryboardSession

logger = get_logger("storyboard.analyzer")


class CharacterSeed(BaseModel):
    """Character entry as returned by the analysis model."""
    name: str
    description: str = ""


class PanelSeed(BaseModel):
    """Panel entry as returned by the analysis model."""
    model_config = ConfigDict(populate_by_name=True)

    panel_number: Optional[int] = Field(default=None, alias="panelNumber")
    visual_description: str = Field(alias="visualDescription")
    image_prompt: Optional[str] = Field(default=None, alias="imagePrompt")
    shot_type: Optional[str] = Field(default=None, alias="shotType")
    dialogue: Optional[str] = ""
    transition: Optional[str] = None


class AnalysisPayload(BaseModel):
    """Top-level analysis response."""
    characters: List[CharacterSeed] = Field(default_factory=list)
    panels: List[PanelSeed] = Field(default_factory=list)


def _parse_json_from_text(text: str) -> Optional[dict]:
    """Parse JSON from text, handling markdown code blocks."""
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    if text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def shape_analysis(raw: Union[str, dict, None]) -> AnalysisResult:
    """
    Shape raw analysis output into an AnalysisResult.

    Args:
        raw: JSON text or an already-decoded dict

    Returns:
        Panels ordered by panel number with fresh ids and cleared flags, plus
        the character list. Empty when ``raw`` is missing or malformed.
    """
    if not raw:
        return AnalysisResult.empty()

    data = _parse_json_from_text(raw) if isinstance(raw, str) else raw
    if data is None:
        logger.error("Failed to parse script analysis: response is not a JSON object")
        return AnalysisResult.empty()

    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as e:
        logger.error(f"Failed to parse script analysis: {e.error_count()} validation error(s)")
        return AnalysisResult.empty()

    panels = [
        Panel(
            id=new_panel_id(),
            panel_number=seed.panel_number if seed.panel_number is not None else position + 1,
            visual_description=seed.visual_description,
            dialogue=seed.dialogue or "",
            image_prompt=seed.image_prompt or None,
            shot_type=seed.shot_type or None,
            transition=Transition.parse(seed.transition),
        )
        for position, seed in enumerate(payload.panels)
    ]
    characters = [CharacterProfile(c.name, c.description) for c in payload.characters]

    return AnalysisResult(panels=sort_panels(panels), characters=characters)


class ScriptAnalyzer:
    """Runs script analysis and initializes a session from its result."""

    def __init__(self, capability: "GenerationCapability"):
        self.capability = capability

    async def analyze(self, session: "StoryboardSession", script_text: str) -> AnalysisResult:
        """
        Analyze ``script_text`` and load the result into ``session``.

        A blank script is ignored. A malformed response still replaces the
        session with the (empty) result, matching a fresh analysis.
        """
        if not script_text or not script_text.strip():
            logger.info("Empty script, skipping analysis")
            return AnalysisResult.empty()

        logger.info(f"Analyzing script ({len(script_text)} chars)")
        raw = await self.capability.analyze_script(script_text, session.credentials)
        result = shape_analysis(raw)

        session.load_analysis(result)
        logger.info(
            f"Analysis produced {len(result.panels)} panel(s) and "
            f"{len(result.characters)} character(s)"
        )
        return result
