"""
StoryForge File Utilities

Text and JSON helpers for session files, config files and imported scripts.
Every failure surfaces as StoryforgeError so the CLI can report it uniformly.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, Union

from storyforge.core.exceptions import StoryforgeError

PathLike = Union[str, Path]

# characters no common filesystem accepts in a name
_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*]')
_SEPARATOR_RUNS = re.compile(r'[\s_]+')


def read_text(path: PathLike, encoding: str = 'utf-8') -> str:
    path = Path(path)
    if not path.is_file():
        raise StoryforgeError(f"File not found: {path}")
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise StoryforgeError(f"Failed to read {path}: {e}")


def read_json(path: PathLike) -> Dict[str, Any]:
    """Load a JSON document; a syntax error is reported with the file name."""
    text = read_text(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise StoryforgeError(f"Invalid JSON in {path}: {e}")


def write_json(path: PathLike, data: Dict[str, Any], indent: int = 2) -> None:
    """Write ``data`` as UTF-8 JSON, creating parent directories as needed."""
    path = Path(path)
    ensure_directory(path.parent)
    try:
        path.write_text(json.dumps(data, indent=indent, ensure_ascii=False), encoding='utf-8')
    except OSError as e:
        raise StoryforgeError(f"Failed to write {path}: {e}")


def ensure_directory(path: PathLike) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_filename(name: str, max_length: int = 100) -> str:
    """Turn a label such as 'panel 3: "night"' into 'panel_3_night'."""
    safe = _SEPARATOR_RUNS.sub('_', _UNSAFE_CHARS.sub('_', name)).strip('_')
    if len(safe) > max_length:
        safe = safe[:max_length].rstrip('_')
    return safe or "unnamed"
