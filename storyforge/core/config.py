"""
StoryForge Configuration Management

Centralized configuration system with JSON loading and validation.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .exceptions import ConfigurationError, InvalidConfigError
from .constants import (
    AspectRatio,
    DEFAULT_BATCH_CONCURRENCY,
    DEFAULT_MODELS,
    DEFAULT_VOICE,
    ImageResolution,
    NARRATION_SAMPLE_RATE,
    OUTPAINT_EXPANSION_FACTOR,
    PROJECT_NAME,
    VERSION,
    VIDEO_MAX_WAIT_SECONDS,
    VIDEO_POLL_INTERVAL_SECONDS,
    VisualStyle,
)


@dataclass
class ModelConfig:
    """Model ids used for each generation capability."""
    analysis: str = DEFAULT_MODELS["analysis"]
    image_fast: str = DEFAULT_MODELS["image_fast"]
    image_pro: str = DEFAULT_MODELS["image_pro"]
    edit: str = DEFAULT_MODELS["edit"]
    video: str = DEFAULT_MODELS["video"]
    animatic: str = DEFAULT_MODELS["animatic"]
    speech: str = DEFAULT_MODELS["speech"]
    voice: str = DEFAULT_VOICE

    @classmethod
    def from_dict(cls, data: dict) -> 'ModelConfig':
        """Create ModelConfig from dictionary, keeping defaults for missing keys."""
        defaults = cls()
        return cls(**{
            name: data.get(name, getattr(defaults, name))
            for name in defaults.__dataclass_fields__
        })


@dataclass
class GenerationConfig:
    """Generation and orchestration settings."""
    style: VisualStyle = VisualStyle.CINEMATIC
    aspect_ratio: AspectRatio = AspectRatio.WIDESCREEN
    resolution: Optional[ImageResolution] = None
    poll_interval_seconds: float = VIDEO_POLL_INTERVAL_SECONDS
    max_poll_seconds: float = VIDEO_MAX_WAIT_SECONDS
    outpaint_expansion: float = OUTPAINT_EXPANSION_FACTOR
    sample_rate: int = NARRATION_SAMPLE_RATE
    suppress_duplicates: bool = True
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY

    @classmethod
    def from_dict(cls, data: dict) -> 'GenerationConfig':
        """Create GenerationConfig from dictionary."""
        try:
            resolution = data.get('resolution')
            config = cls(
                style=VisualStyle.parse(data.get('style', VisualStyle.CINEMATIC.value)),
                aspect_ratio=AspectRatio(data.get('aspect_ratio', AspectRatio.WIDESCREEN.value)),
                resolution=ImageResolution(resolution) if resolution else None,
                poll_interval_seconds=float(data.get('poll_interval_seconds', VIDEO_POLL_INTERVAL_SECONDS)),
                max_poll_seconds=float(data.get('max_poll_seconds', VIDEO_MAX_WAIT_SECONDS)),
                outpaint_expansion=float(data.get('outpaint_expansion', OUTPAINT_EXPANSION_FACTOR)),
                sample_rate=int(data.get('sample_rate', NARRATION_SAMPLE_RATE)),
                suppress_duplicates=bool(data.get('suppress_duplicates', True)),
                batch_concurrency=int(data.get('batch_concurrency', DEFAULT_BATCH_CONCURRENCY)),
            )
        except (ValueError, TypeError) as e:
            raise InvalidConfigError(f"Invalid generation config: {e}")

        if config.poll_interval_seconds <= 0:
            raise InvalidConfigError("poll_interval_seconds must be positive")
        if config.batch_concurrency < 1:
            raise InvalidConfigError("batch_concurrency must be at least 1")
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            'style': self.style.value,
            'aspect_ratio': self.aspect_ratio.value,
            'resolution': self.resolution.value if self.resolution else None,
            'poll_interval_seconds': self.poll_interval_seconds,
            'max_poll_seconds': self.max_poll_seconds,
            'outpaint_expansion': self.outpaint_expansion,
            'sample_rate': self.sample_rate,
            'suppress_duplicates': self.suppress_duplicates,
            'batch_concurrency': self.batch_concurrency,
        }


@dataclass
class StoryforgeConfig:
    """Main configuration class for StoryForge."""

    app_name: str = PROJECT_NAME
    version: str = VERSION

    logs_dir: Path = field(default_factory=lambda: Path("logs"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    models: ModelConfig = field(default_factory=ModelConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    verbose_logging: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'StoryforgeConfig':
        """Create StoryforgeConfig from dictionary."""
        config = cls()

        config.app_name = data.get('app_name', config.app_name)
        config.version = data.get('version', config.version)
        config.verbose_logging = data.get('verbose_logging', config.verbose_logging)

        if 'paths' in data:
            paths = data['paths']
            config.logs_dir = Path(paths.get('logs_dir', 'logs'))
            config.output_dir = Path(paths.get('output_dir', 'output'))

        if 'models' in data:
            config.models = ModelConfig.from_dict(data['models'])

        if 'generation' in data:
            config.generation = GenerationConfig.from_dict(data['generation'])

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            'app_name': self.app_name,
            'version': self.version,
            'verbose_logging': self.verbose_logging,
            'paths': {
                'logs_dir': str(self.logs_dir),
                'output_dir': str(self.output_dir),
            },
            'models': asdict(self.models),
            'generation': self.generation.to_dict(),
        }


def get_default_config() -> StoryforgeConfig:
    """Return a fresh configuration with all defaults."""
    return StoryforgeConfig()


def load_config(config_path: Union[str, Path, None] = None) -> StoryforgeConfig:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to configuration file. If None, uses default.

    Returns:
        Loaded StoryforgeConfig instance
    """
    config_path = Path(config_path) if config_path else Path("config/storyforge_config.json")

    if not config_path.exists():
        return StoryforgeConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigError(f"Invalid JSON in config file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config: {e}")

    return StoryforgeConfig.from_dict(data)


def save_config(config: StoryforgeConfig, config_path: Union[str, Path]) -> None:
    """Write configuration to a JSON file."""
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)


# Global config instance
_config: Optional[StoryforgeConfig] = None


def get_config() -> StoryforgeConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: StoryforgeConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
