"""
StoryForge Storyboard Module

Panel model and history, character registry, prompt composition, outpaint
compositing, narration, script analysis and generation orchestration.
"""

from .models import AnalysisResult, CharacterProfile, Panel, Transition
from .history import PanelStore
from .characters import CharacterRegistry
from .outpaint import OutpaintDirection
from .session import StoryboardSession
from .analyzer import ScriptAnalyzer, shape_analysis
from .orchestrator import BatchOutcome, GenerationOrchestrator, OperationOutcome

__all__ = [
    'AnalysisResult',
    'CharacterProfile',
    'Panel',
    'Transition',
    'PanelStore',
    'CharacterRegistry',
    'OutpaintDirection',
    'StoryboardSession',
    'ScriptAnalyzer',
    'shape_analysis',
    'BatchOutcome',
    'GenerationOrchestrator',
    'OperationOutcome',
]
