"""
Tests for the command line entry point

Tests for storyforge/__main__.py
"""

import json
import pytest
from unittest.mock import patch

from storyforge.__main__ import build_parser, run
from storyforge.core.constants import AspectRatio, VisualStyle


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["script.txt"])

        assert args.script == "script.txt"
        assert args.out == "storyboard.json"
        assert args.generate_all is False
        assert args.style is None

    def test_style_parsed_to_enum(self):
        args = build_parser().parse_args(["s.txt", "--style", "Film Noir", "--ratio", "9:16"])

        assert args.style is VisualStyle.NOIR
        assert args.ratio == "9:16"

    def test_bad_style_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["s.txt", "--style", "Oil Painting"])


class TestRun:
    """Tests for the async CLI flow."""

    @pytest.mark.asyncio
    async def test_analyze_and_generate(self, temp_dir, sample_script, sample_analysis,
                                        fake_capability, fast_config, credentials):
        script_path = temp_dir / "script.txt"
        script_path.write_text(sample_script, encoding="utf-8")
        fake_capability.analyze_script.return_value = json.dumps(sample_analysis)
        args = build_parser().parse_args([
            str(script_path), "--out", str(temp_dir / "board.json"),
            "--generate-all", "--ratio", "9:16",
        ])

        with patch("storyforge.__main__.GeminiCapability", return_value=fake_capability):
            session = await run(args, fast_config, credentials)

        assert session.aspect_ratio is AspectRatio.VERTICAL
        assert len(session.panels) == 2
        assert all(p.has_image for p in session.panels)
        assert fake_capability.generate_image.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_analysis_stops_early(self, temp_dir, fake_capability, fast_config, credentials):
        script_path = temp_dir / "script.txt"
        script_path.write_text("FADE IN.", encoding="utf-8")
        args = build_parser().parse_args([str(script_path), "--generate-all"])

        with patch("storyforge.__main__.GeminiCapability", return_value=fake_capability):
            session = await run(args, fast_config, credentials)

        assert len(session.panels) == 0
        fake_capability.generate_image.assert_not_called()
