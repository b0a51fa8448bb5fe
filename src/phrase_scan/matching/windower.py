"""Windowed phrase search over time-stamped transcript segments.

A phrase spoken across a segment boundary ("hello" | "world today") is found
by joining up to ``window_size`` consecutive segments into one candidate text.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Sequence

from phrase_scan.matching.phrase import soft_contains
from phrase_scan.models.hit import WordHit

if TYPE_CHECKING:
    from phrase_scan.config import MatchConfig
    from phrase_scan.models.transcript import Segment

# HH:MM:SS.fff, the format whisper.cpp writes (after "," -> ".")
_EXACT_TIME = re.compile(r"(\d{2}):(\d{2}):(\d{2})\.(\d{3})")

# [-][d.]h:mm[:ss[.fffffff]]
_GENERAL_TIME = re.compile(
    r"(-)?(?:(\d+)\.)?(\d{1,2}):(\d{1,2})(?::(\d{1,2})(?:\.(\d{1,7}))?)?"
)

_DAYS_ONLY = re.compile(r"(-)?(\d+)")

_SECONDS_PER_DAY = 86400


def _to_seconds(days: int, hours: int, minutes: int, seconds: int, fraction: str) -> float | None:
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    total = days * _SECONDS_PER_DAY + hours * 3600 + minutes * 60 + seconds
    if fraction:
        total += int(fraction) / 10 ** len(fraction)
    return total


def parse_time_flexible(value: str | None) -> float:
    """Parse a segment timestamp to seconds.

    Accepts ``HH:MM:SS.fff`` with either "." or "," before the milliseconds,
    then falls back to a general duration such as ``1:02``,
    ``00:01:02.5`` or ``1.02:03:04`` (days before the dot). A bare integer
    is read as a number of days. Empty or unparsable input gives 0.0.

    Args:
        value: Timestamp string

    Returns:
        Time in seconds
    """
    if not value or value.isspace():
        return 0.0

    text = value.strip().replace(",", ".")

    match = _EXACT_TIME.fullmatch(text)
    if match:
        hours, minutes, seconds, millis = match.groups()
        parsed = _to_seconds(0, int(hours), int(minutes), int(seconds), millis)
        if parsed is not None:
            return parsed

    match = _GENERAL_TIME.fullmatch(text)
    if match:
        sign, days, hours, minutes, seconds, fraction = match.groups()
        parsed = _to_seconds(
            int(days or 0), int(hours), int(minutes), int(seconds or 0), fraction or ""
        )
        if parsed is not None:
            return -parsed if sign else parsed

    match = _DAYS_ONLY.fullmatch(text)
    if match:
        sign, days = match.groups()
        total = float(int(days) * _SECONDS_PER_DAY)
        return -total if sign else total

    return 0.0


def find_hits(
    segments: Sequence[Segment],
    config: MatchConfig,
    source_id: str,
) -> list[WordHit]:
    """Find phrase occurrences across consecutive transcript segments.

    Blank segments are dropped. From each start segment the window grows one
    segment at a time, up to ``config.window_size`` segments, and the joined
    text is tested after every step. The first accepted window becomes a hit
    and the search resumes after its last segment, so hits never share a
    segment.

    Args:
        segments: Transcript segments in spoken order
        config: Matching policy
        source_id: Identifier recorded on each hit

    Returns:
        Hits in transcript order
    """
    items = [segment for segment in segments if not segment.is_blank]
    hits: list[WordHit] = []

    cursor = 0
    while cursor < len(items):
        next_cursor = cursor + 1
        start = parse_time_flexible(items[cursor].start)
        parts: list[str] = []

        for j in range(cursor, min(len(items), cursor + config.window_size)):
            parts.append(items[j].text)
            end = parse_time_flexible(items[j].end)
            combined = " ".join(parts)

            if soft_contains(
                combined,
                config.normalized_phrase,
                config.max_token_distance,
                config.allow_substring,
            ):
                window_start = max(start, 0.0)
                hits.append(
                    WordHit(
                        source=source_id,
                        phrase=config.normalized_phrase,
                        start=window_start,
                        end=max(end, window_start),
                        context=combined,
                    )
                )
                next_cursor = j + 1
                break

        cursor = next_cursor

    return hits
