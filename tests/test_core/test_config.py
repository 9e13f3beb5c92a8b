"""
Tests for Configuration Module

Tests for storyforge/core/config.py
"""

import pytest
import json

from storyforge.core.config import (
    GenerationConfig,
    ModelConfig,
    StoryforgeConfig,
    load_config,
    save_config,
    get_default_config
)
from storyforge.core.constants import AspectRatio, DEFAULT_MODELS, ImageResolution, VisualStyle
from storyforge.core.exceptions import InvalidConfigError


class TestStoryforgeConfig:
    """Tests for StoryforgeConfig class."""

    def test_default_config(self):
        """Test default configuration creation."""
        config = get_default_config()

        assert config.app_name == "StoryForge"
        assert config.models.video == DEFAULT_MODELS["video"]
        assert config.generation.poll_interval_seconds == 5.0
        assert config.generation.suppress_duplicates is True

    def test_config_from_dict(self):
        """Test creating config from dictionary."""
        config = StoryforgeConfig.from_dict({
            "app_name": "Board",
            "paths": {"output_dir": "boards"},
            "models": {"voice": "Kore"},
            "generation": {"style": "Film Noir", "aspect_ratio": "9:16", "resolution": "2K"},
        })

        assert config.app_name == "Board"
        assert str(config.output_dir) == "boards"
        assert config.models.voice == "Kore"
        assert config.models.analysis == DEFAULT_MODELS["analysis"]
        assert config.generation.style is VisualStyle.NOIR
        assert config.generation.aspect_ratio is AspectRatio.VERTICAL
        assert config.generation.resolution is ImageResolution.R2K

    def test_config_to_dict(self):
        """Test converting config to dictionary."""
        config_dict = get_default_config().to_dict()

        assert config_dict["app_name"] == "StoryForge"
        assert config_dict["generation"]["aspect_ratio"] == "16:9"
        assert config_dict["generation"]["resolution"] is None
        assert config_dict["models"]["voice"] == "Fenrir"


class TestGenerationConfig:
    """Tests for generation settings validation."""

    def test_style_accepts_member_name(self):
        """Styles can be given by display value or enum name."""
        assert GenerationConfig.from_dict({"style": "ANIME"}).style is VisualStyle.ANIME

    def test_unknown_aspect_ratio_rejected(self):
        with pytest.raises(InvalidConfigError):
            GenerationConfig.from_dict({"aspect_ratio": "21:9"})

    def test_non_positive_poll_interval_rejected(self):
        with pytest.raises(InvalidConfigError):
            GenerationConfig.from_dict({"poll_interval_seconds": 0})

    def test_zero_concurrency_rejected(self):
        with pytest.raises(InvalidConfigError):
            GenerationConfig.from_dict({"batch_concurrency": 0})

    def test_model_config_keeps_defaults(self):
        models = ModelConfig.from_dict({"edit": "custom-edit"})

        assert models.edit == "custom-edit"
        assert models.speech == DEFAULT_MODELS["speech"]


class TestLoadSaveConfig:
    """Tests for config loading and saving."""

    def test_load_config_from_file(self, temp_dir):
        """Test loading config from JSON file."""
        config_path = temp_dir / "test_config.json"

        with open(config_path, 'w') as f:
            json.dump({"generation": {"batch_concurrency": 2}}, f)

        config = load_config(str(config_path))

        assert config.generation.batch_concurrency == 2

    def test_load_missing_file_gives_defaults(self, temp_dir):
        config = load_config(temp_dir / "absent.json")

        assert config.to_dict() == get_default_config().to_dict()

    def test_load_invalid_json(self, temp_dir):
        config_path = temp_dir / "broken.json"
        config_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidConfigError):
            load_config(config_path)

    def test_save_and_reload(self, temp_dir):
        """Saved configuration loads back unchanged."""
        config = get_default_config()
        config.generation.style = VisualStyle.WATERCOLOR
        config.generation.resolution = ImageResolution.R4K
        config_path = temp_dir / "nested" / "config.json"

        save_config(config, config_path)
        loaded = load_config(config_path)

        assert loaded.to_dict() == config.to_dict()
