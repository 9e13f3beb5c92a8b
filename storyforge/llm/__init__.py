"""
StoryForge LLM Module

Generation capability protocol, credential context and the Gemini backend.
"""

from .capability import CredentialContext, GenerationCapability, is_credential_error, with_key
from .gemini_client import GeminiCapability

__all__ = [
    'CredentialContext',
    'GenerationCapability',
    'GeminiCapability',
    'is_credential_error',
    'with_key',
]
