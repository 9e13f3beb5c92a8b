"""
Tests for Prompt Composer

Tests for storyforge/storyboard/prompt_composer.py
"""

from storyforge.core.constants import QUALITY_SUFFIX, VisualStyle
from storyforge.storyboard.characters import CharacterRegistry
from storyforge.storyboard.models import CharacterProfile, Transition
from storyforge.storyboard.outpaint import OutpaintDirection
from storyforge.storyboard.prompt_composer import (
    ANIMATIC_CLOSING,
    ANIMATIC_OPENING,
    compose_animatic_prompt,
    compose_edit_prompt,
    compose_image_prompt,
    compose_outpaint_prompt,
    reinforce_characters,
    select_animatic_panels,
)


class TestImagePrompt:
    """Tests for compose_image_prompt."""

    def test_reinforces_named_character(self, panel_factory):
        """An edited description is appended to the cached prompt."""
        panel = panel_factory("p1", 1, image_prompt="Maya walks")
        characters = [CharacterProfile("Maya", "tall, red coat")]

        prompt = compose_image_prompt(panel, VisualStyle.CINEMATIC, characters)

        assert "Maya walks (Maya is tall, red coat)" in prompt

    def test_no_match_leaves_prompt_verbatim(self, panel_factory):
        panel = panel_factory("p1", 1, image_prompt="An empty street at dawn")
        characters = [CharacterProfile("Maya", "tall, red coat")]

        prompt = compose_image_prompt(panel, VisualStyle.NOIR, characters)

        assert (
            "[Technical Scene Description]\nAn empty street at dawn\n" in prompt
        )
        assert "Art Style: Film Noir" in prompt
        assert prompt.endswith(QUALITY_SUFFIX)

    def test_sections_in_order(self, panel_factory):
        prompt = compose_image_prompt(panel_factory("p1", 1, image_prompt="x"), "Custom", [])

        style = prompt.index("[Style Specification]")
        scene = prompt.index("[Technical Scene Description]")
        specs = prompt.index("[Technical Specifications]")
        assert style < scene < specs
        assert "Art Style: Custom" in prompt

    def test_fallback_without_cached_prompt(self, panel_factory):
        """Panels without an image prompt are built from their fields."""
        panel = panel_factory(
            "p1", 1,
            visual_description="Leo flips a pancake",
            shot_type="Wide",
        )
        characters = [
            CharacterProfile("Leo", "an older cook"),
            CharacterProfile("Maya", "a courier"),
        ]

        prompt = compose_image_prompt(panel, VisualStyle.SKETCH, characters)

        assert "Shot Type: Wide. Scene: Leo flips a pancake. Characters: Leo is an older cook." in prompt
        assert "Maya" not in prompt

    def test_fallback_matches_dialogue(self, panel_factory):
        panel = panel_factory("p1", 1, visual_description="A booth", dialogue="Where is Maya?")

        prompt = compose_image_prompt(panel, VisualStyle.SKETCH, [CharacterProfile("Maya", "a courier")])

        assert "Maya is a courier." in prompt

    def test_same_inputs_same_prompt(self, panel_factory, sample_characters):
        panel = panel_factory("p1", 1, image_prompt="Maya waits by the window")

        first = compose_image_prompt(panel, VisualStyle.CINEMATIC, sample_characters)
        second = compose_image_prompt(panel, VisualStyle.CINEMATIC, sample_characters)

        assert first == second

    def test_unrelated_character_edit_keeps_prompt(self, panel_factory, sample_characters):
        """Editing Leo does not touch a prompt that only mentions Maya."""
        registry = CharacterRegistry(sample_characters)
        cached = panel_factory("p1", 1, image_prompt="Maya waits by the window")
        fallback = panel_factory("p2", 2, visual_description="Maya checks her phone")
        before = [
            compose_image_prompt(p, VisualStyle.ANIME, registry.characters)
            for p in (cached, fallback)
        ]

        registry.update_description(1, "a young cook with a shaved head")
        after = [
            compose_image_prompt(p, VisualStyle.ANIME, registry.characters)
            for p in (cached, fallback)
        ]

        assert after == before

    def test_reinforcement_order_follows_registry(self):
        characters = [CharacterProfile("Leo", "cook"), CharacterProfile("Maya", "courier")]

        result = reinforce_characters("Maya and Leo talk", characters)

        assert result == "Maya and Leo talk (Leo is cook) (Maya is courier)"

    def test_overlapping_names_both_match(self):
        """Plain substring matching: 'Ann' is found inside 'Anna'."""
        characters = [CharacterProfile("Ann", "a"), CharacterProfile("Anna", "b")]

        result = reinforce_characters("Anna smiles", characters)

        assert "(Ann is a)" in result
        assert "(Anna is b)" in result


class TestEditAndOutpaintPrompts:
    """Tests for edit and outpaint instructions."""

    def test_edit_prompt_is_instruction(self):
        assert compose_edit_prompt("  make it rain  ") == "make it rain"

    def test_outpaint_prompt_names_direction(self):
        prompt = compose_outpaint_prompt(OutpaintDirection.ZOOM_OUT)

        assert "empty space added to the zoom-out" in prompt
        assert "Do not change the original content" in prompt

    def test_outpaint_prompt_accepts_string(self):
        assert "added to the left" in compose_outpaint_prompt("left")


class TestAnimatic:
    """Tests for animatic panel selection and prompt."""

    def test_needs_two_images_in_first_three(self, panel_factory):
        panels = [
            panel_factory("a", 1, image_url="img-a"),
            panel_factory("b", 2),
            panel_factory("c", 3),
            panel_factory("d", 4, image_url="img-d"),
        ]

        assert select_animatic_panels(panels) is None

    def test_selects_image_bearing_panels_in_order(self, panel_factory):
        panels = [
            panel_factory("c", 3, image_url="img-c"),
            panel_factory("a", 1, image_url="img-a"),
            panel_factory("b", 2),
        ]

        chosen = select_animatic_panels(panels)

        assert [p.id for p in chosen] == ["a", "c"]

    def test_prompt_structure(self, panel_factory):
        panels = [
            panel_factory("a", 1, visual_description="Maya enters", transition=Transition.FADE),
            panel_factory("b", 2, visual_description="Leo looks up", transition=Transition.WIPE),
        ]
        characters = [CharacterProfile("Maya", "courier"), CharacterProfile("Leo", "cook")]

        prompt = compose_animatic_prompt(panels, characters)

        assert prompt.startswith(ANIMATIC_OPENING)
        assert "Characters details: Maya: courier. Leo: cook." in prompt
        assert "Scene 1: Maya enters. Transition to next scene using Fade effect." in prompt
        assert "Scene 2: Leo looks up." in prompt
        assert "Wipe" not in prompt
        assert prompt.endswith(ANIMATIC_CLOSING)

    def test_prompt_without_characters(self, panel_factory):
        panels = [panel_factory("a", 1), panel_factory("b", 2)]

        prompt = compose_animatic_prompt(panels, [])

        assert "Characters details" not in prompt
        assert "Transition" not in prompt
