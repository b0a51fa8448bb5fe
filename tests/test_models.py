"""Tests for transcript and hit models."""

import json

import pytest
from pydantic import ValidationError

from phrase_scan.models import Segment, WhisperTranscript, WordHit


class TestWordHit:
    """Tests for WordHit."""

    def test_duration(self):
        """Test the window duration."""
        hit = WordHit(source="a.wav", phrase="hello", start=1.25, end=3.0, context="hello")

        assert hit.duration == pytest.approx(1.75)

    def test_to_dict(self):
        """Test conversion to a dictionary."""
        hit = WordHit(source="a.wav", phrase="hello", start=1.0, end=2.0, context="well hello")

        assert hit.to_dict() == {
            "source": "a.wav",
            "phrase": "hello",
            "start": 1.0,
            "end": 2.0,
            "context": "well hello",
        }

    def test_frozen(self):
        """Test that hits cannot be changed after creation."""
        hit = WordHit(source="a.wav", phrase="hello", start=0.0, end=1.0, context="hello")

        with pytest.raises(AttributeError):
            hit.start = 5.0


class TestSegment:
    """Tests for Segment."""

    def test_from_times(self):
        """Test building a segment from raw timestamps."""
        segment = Segment.from_times("hello", "00:00:01,000", "00:00:02,000")

        assert segment.start == "00:00:01,000"
        assert segment.end == "00:00:02,000"

    def test_without_timestamps(self):
        """Test a segment without timestamps."""
        segment = Segment(text="hello")

        assert segment.start is None
        assert segment.end is None

    @pytest.mark.parametrize("text,blank", [("", True), ("  \n", True), (None, True), (" hi", False)])
    def test_is_blank(self, text, blank):
        """Test blank detection."""
        assert Segment(text=text).is_blank is blank


class TestWhisperTranscript:
    """Tests for WhisperTranscript."""

    def test_from_json(self):
        """Test reading whisper.cpp output."""
        transcript = WhisperTranscript.from_json(
            json.dumps(
                {
                    "transcription": [
                        {
                            "timestamps": {"from": "00:00:00,000", "to": "00:00:01,500"},
                            "offsets": {"from": 0, "to": 1500},
                            "text": " Hello",
                        }
                    ]
                }
            )
        )

        segment = transcript.transcription[0]
        assert segment.text == " Hello"
        assert segment.end == "00:00:01,500"
        assert segment.offsets.to == 1500

    def test_mixed_case_keys(self):
        """Test that property names match case-insensitively."""
        transcript = WhisperTranscript.from_json(
            '{"TRANSCRIPTION": [{"Text": "hi", "TimeStamps": {"FROM": "00:00:01,000"}}]}'
        )

        assert transcript.transcription[0].text == "hi"
        assert transcript.transcription[0].start == "00:00:01,000"

    def test_missing_transcription(self):
        """Test that a document without segments is empty."""
        assert WhisperTranscript.from_json("{}").transcription == []

    def test_invalid_json(self):
        """Test that invalid JSON raises."""
        with pytest.raises(json.JSONDecodeError):
            WhisperTranscript.from_json("{")

    def test_wrong_shape(self):
        """Test that a wrongly shaped document raises."""
        with pytest.raises(ValidationError):
            WhisperTranscript.from_json('{"transcription": 5}')
