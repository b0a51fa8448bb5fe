"""Transcription backends for phrase-scan."""

from phrase_scan.transcription.base import TranscriptionBackend
from phrase_scan.transcription.whisper_cpp import WhisperCppBackend

__all__ = [
    "TranscriptionBackend",
    "WhisperCppBackend",
]
