"""Error types for phrase-scan.

The matching engine itself never raises for bad transcript data; it degrades
to empty results. Errors here cover the surrounding application: invalid
configuration, missing inputs and failures of the external transcriber.
"""

from __future__ import annotations

import subprocess
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    CONFIGURATION = "configuration"  # Bad config - fix and rerun
    RESOURCE = "resource"  # Missing file/directory
    EXTERNAL = "external"  # Transcriber failed - skip this input
    INTERNAL = "internal"  # Bug in code


class PhraseScanError(Exception):
    """Base exception for phrase-scan errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        recoverable: Whether other inputs can still be processed
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class ConfigurationError(PhraseScanError):
    """Configuration could not be loaded or failed validation.

    Examples: negative edit distance, zero window size, missing config file.
    """

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class ResourceError(PhraseScanError):
    """A required file or directory does not exist."""

    category = ErrorCategory.RESOURCE

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


class TranscriptionError(PhraseScanError):
    """The external transcription process could not produce a transcript.

    Recoverable: the failing input is skipped and the scan continues.
    """

    category = ErrorCategory.EXTERNAL

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=True)


def wrap_transcription_error(error: Exception, audio_path: str, executable: str) -> TranscriptionError:
    """Wrap an error raised while launching the transcriber.

    Args:
        error: Original error
        audio_path: Audio file being transcribed
        executable: Transcriber executable that was invoked

    Returns:
        TranscriptionError carrying the audio path and executable as context
    """
    context = {"audio": audio_path, "executable": executable}

    if isinstance(error, FileNotFoundError):
        return TranscriptionError(f"Transcriber executable not found: {executable}", context)
    if isinstance(error, subprocess.TimeoutExpired):
        return TranscriptionError(f"Transcriber timed out after {error.timeout} seconds", context)

    return TranscriptionError(f"Failed to run transcriber: {error}", context)


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, PhraseScanError):
        category = error.category.value
        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {error.message} ({context_str})"
        return f"[{category}] {error.message}"

    return f"[error] {type(error).__name__}: {error}"
