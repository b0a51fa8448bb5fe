"""Data models for phrase-scan."""

from phrase_scan.models.hit import WordHit
from phrase_scan.models.transcript import (
    Offsets,
    Segment,
    Timestamps,
    WhisperTranscript,
)

__all__ = [
    "Offsets",
    "Segment",
    "Timestamps",
    "WhisperTranscript",
    "WordHit",
]
