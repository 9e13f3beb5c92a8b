"""
StoryForge Utilities Module
"""

from .file_utils import read_json, write_json, read_text, ensure_directory, safe_filename
from .script_import import SUPPORTED_EXTENSIONS, import_script

__all__ = [
    'read_json',
    'write_json',
    'read_text',
    'ensure_directory',
    'safe_filename',
    'SUPPORTED_EXTENSIONS',
    'import_script',
]
