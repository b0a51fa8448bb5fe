"""Transcript models for phrase-scan.

Mirrors the JSON written by whisper.cpp with ``-oj``:

    {"transcription": [
        {"timestamps": {"from": "00:00:00,000", "to": "00:00:02,340"},
         "offsets": {"from": 0, "to": 2340},
         "text": " Hello there"}
    ]}

Only the ``transcription`` array is read; other top-level keys are ignored.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _fold_keys(value: Any) -> Any:
    """Lowercase every object key so property names match case-insensitively."""
    if isinstance(value, dict):
        return {str(k).lower(): _fold_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_fold_keys(item) for item in value]
    return value


class Timestamps(BaseModel):
    """Segment boundaries as written by the transcriber ("HH:MM:SS,mmm")."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str | None = Field(default=None, alias="from")
    to: str | None = None


class Offsets(BaseModel):
    """Segment boundaries in milliseconds."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: int | None = Field(default=None, alias="from")
    to: int | None = None


class Segment(BaseModel):
    """One time-stamped unit of transcribed speech.

    Segments are read-only; the matcher never modifies them.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    timestamps: Timestamps | None = None
    offsets: Offsets | None = None

    @field_validator("text", mode="before")
    @classmethod
    def _none_text_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_times(cls, text: str, start: str | None = None, end: str | None = None) -> "Segment":
        """Build a segment from text and raw timestamp strings."""
        return cls(text=text, timestamps=Timestamps(from_=start, to=end))

    @property
    def start(self) -> str | None:
        """Raw start timestamp, if any."""
        return self.timestamps.from_ if self.timestamps else None

    @property
    def end(self) -> str | None:
        """Raw end timestamp, if any."""
        return self.timestamps.to if self.timestamps else None

    @property
    def is_blank(self) -> bool:
        """True when the segment carries no text."""
        return not self.text or self.text.isspace()


class WhisperTranscript(BaseModel):
    """A whisper.cpp JSON transcript."""

    model_config = ConfigDict(frozen=True)

    transcription: list[Segment] = Field(default_factory=list)

    @field_validator("transcription", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_json(cls, text: str) -> "WhisperTranscript":
        """Parse transcript JSON, matching property names case-insensitively.

        Raises:
            json.JSONDecodeError: If the text is not valid JSON
            pydantic.ValidationError: If the document has the wrong shape
        """
        return cls.model_validate(_fold_keys(json.loads(text)))
