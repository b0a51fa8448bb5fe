"""Find phrase hits in transcriber output.

``TranscriptParser`` is the single entry point used by the transcription
backends. It searches segment by segment when the output has a
``transcription`` array and falls back to searching the raw text otherwise.
Malformed input never raises; it simply yields no hits.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from phrase_scan.config import MatchConfig
from phrase_scan.logging import get_logger
from phrase_scan.matching.phrase import soft_contains
from phrase_scan.matching.windower import find_hits
from phrase_scan.models.hit import WordHit
from phrase_scan.models.transcript import WhisperTranscript

logger = get_logger(__name__)

STRUCTURE_MARKER = '"transcription"'

# Context recorded when the phrase was found without segment structure
BLOB_CONTEXT = "(match found in JSON blob)"


class TranscriptParser:
    """Searches transcripts for the phrase in a fixed MatchConfig.

    Holds no state besides the configuration, so one instance can serve
    many threads at once.
    """

    def __init__(self, config: MatchConfig):
        self.config = config

    @property
    def phrase(self) -> str:
        """The normalized search phrase."""
        return self.config.normalized_phrase

    def parse(self, source: str, source_id: str) -> list[WordHit]:
        """Find every hit in one transcript.

        Args:
            source: Transcriber output (whisper.cpp JSON or any text)
            source_id: Identifier recorded on each hit

        Returns:
            Hits in transcript order; empty when nothing matched or the
            input could not be read
        """
        if not source:
            return []

        if STRUCTURE_MARKER in source.lower():
            return self._parse_segments(source, source_id)
        return self._parse_blob(source, source_id)

    def parse_file(self, json_path: Path, source_id: str) -> list[WordHit]:
        """Read a transcript file and search it.

        Invalid UTF-8 (whisper.cpp can split a multibyte character across
        tokens) is replaced rather than rejected.

        Raises:
            OSError: If the file cannot be read
        """
        source = json_path.read_text(encoding="utf-8-sig", errors="replace")
        return self.parse(source, source_id)

    def _parse_segments(self, source: str, source_id: str) -> list[WordHit]:
        try:
            transcript = WhisperTranscript.from_json(source)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(
                f"Unreadable transcript for {source_id}: {type(e).__name__}",
                extra={"source": source_id},
            )
            return []

        hits = find_hits(transcript.transcription, self.config, source_id)
        logger.debug(
            f"Searched {len(transcript.transcription)} segments in {source_id}",
            extra={"hits": len(hits)},
        )
        return hits

    def _parse_blob(self, source: str, source_id: str) -> list[WordHit]:
        logger.debug(f"No segment structure in {source_id}, searching raw text")

        if not soft_contains(
            source,
            self.phrase,
            self.config.max_token_distance,
            self.config.allow_substring,
        ):
            return []

        return [
            WordHit(
                source=source_id,
                phrase=self.phrase,
                start=0.0,
                end=0.0,
                context=BLOB_CONTEXT,
            )
        ]
