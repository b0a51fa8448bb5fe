"""Match records produced by the phrase search."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WordHit:
    """One occurrence of the target phrase in a transcript.

    Attributes:
        source: Identifier of the transcribed input (usually the audio path)
        phrase: The normalized phrase that was searched for
        start: Start of the matching window in seconds
        end: End of the matching window in seconds
        context: Text the phrase was found in
    """

    source: str
    phrase: str
    start: float
    end: float
    context: str

    @property
    def duration(self) -> float:
        """Duration of the matching window in seconds."""
        return self.end - self.start

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "phrase": self.phrase,
            "start": self.start,
            "end": self.end,
            "context": self.context,
        }
