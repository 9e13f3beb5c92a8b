"""
StoryForge Core Module

Contains core systems including configuration, constants, exceptions, logging
and polling.
"""

from .config import StoryforgeConfig, load_config, get_config, set_config
from .constants import *
from .exceptions import *
from .logging_config import setup_logging, get_logger
from .polling import AbortToken, poll_until_done

__all__ = [
    'StoryforgeConfig',
    'load_config',
    'get_config',
    'set_config',
    'setup_logging',
    'get_logger',
    'AbortToken',
    'poll_until_done',
]
