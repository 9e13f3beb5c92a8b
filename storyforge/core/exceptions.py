"""
StoryForge Custom Exceptions

Exception classes for error handling throughout the storyboarding pipeline.
"""

from typing import Iterable


class StoryforgeError(Exception):
    """Base exception for all StoryForge errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(StoryforgeError):
    """Raised when there's an issue with configuration."""
    pass


class MissingConfigError(ConfigurationError):
    """Raised when a required configuration is missing."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when a configuration value is invalid."""
    pass


# =============================================================================
# GENERATION ERRORS
# =============================================================================

class GenerationError(StoryforgeError):
    """Base exception for media generation errors."""
    pass


class CredentialError(GenerationError):
    """
    Raised when the provider rejects the selected key.

    Never handled silently: callers must prompt the user to select a
    billing-enabled key again.
    """

    def __init__(self, reason: str, operation: str = None):
        message = f"Credential rejected: {reason}"
        details = {"reason": reason}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
        self.reason = reason
        self.operation = operation


class CompositingError(GenerationError):
    """Raised when a local image transform cannot be performed."""
    pass


class PollTimeoutError(GenerationError):
    """Raised when a long-running operation exceeds its deadline."""

    def __init__(self, operation: str, waited_seconds: float):
        message = f"Operation '{operation}' did not finish after {waited_seconds:.0f}s"
        super().__init__(message, {"operation": operation, "waited_seconds": waited_seconds})


class OperationAbortedError(GenerationError):
    """Raised when a polled operation is aborted through its token."""

    def __init__(self, operation: str):
        super().__init__(f"Operation '{operation}' was aborted", {"operation": operation})


# =============================================================================
# STORYBOARD ERRORS
# =============================================================================

class StoryboardError(StoryforgeError):
    """Base exception for panel store errors."""
    pass


class PanelNotFoundError(StoryboardError):
    """Raised when a panel id is not present in the current collection."""

    def __init__(self, panel_id: str):
        super().__init__(f"Panel not found: '{panel_id}'", {"panel_id": panel_id})
        self.panel_id = panel_id


# =============================================================================
# IMPORT ERRORS
# =============================================================================

class ImportFormatError(StoryforgeError):
    """Base exception for script import errors."""
    pass


class UnsupportedFormatError(ImportFormatError):
    """Raised when a script file has an extension we cannot read."""

    def __init__(self, extension: str, supported: Iterable[str]):
        supported = list(supported)
        shown = extension or "(none)"
        message = (
            f"Unsupported file extension: {shown}. "
            f"Please upload {', '.join(supported)} files."
        )
        super().__init__(message, {"extension": extension, "supported": supported})
        self.extension = extension
        self.supported = supported
