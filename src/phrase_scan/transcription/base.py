"""Base class for transcription backends.

A backend turns one audio file into phrase hits: it runs (or reuses) a
transcription and hands the result to a ``TranscriptParser``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from phrase_scan.models.hit import WordHit


class TranscriptionBackend(ABC):
    """Abstract base class for transcription backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the backend name."""
        pass

    @abstractmethod
    def transcribe_then_find(self, audio_path: Path) -> list[WordHit]:
        """Transcribe an audio file and search the transcript.

        Args:
            audio_path: Audio file to transcribe

        Returns:
            Hits found in the transcript; empty if there were none or no
            transcript was produced

        Raises:
            TranscriptionError: If the transcriber could not be run
        """
        pass

    def is_available(self) -> bool:
        """Check if the backend can be used.

        Returns:
            True if the backend can be used
        """
        return True
