"""Fuzzy phrase matching for speech transcripts.

Tolerates the noise typical of automatic transcription: plural and
possessive endings, small misspellings and phrases split across segments.
"""

from phrase_scan.matching.phrase import soft_contains
from phrase_scan.matching.similarity import (
    effective_max_distance,
    levenshtein_distance,
    tokens_match,
)
from phrase_scan.matching.text import normalize, stem_lite, tokenize
from phrase_scan.matching.windower import find_hits, parse_time_flexible

__all__ = [
    "effective_max_distance",
    "find_hits",
    "levenshtein_distance",
    "normalize",
    "parse_time_flexible",
    "soft_contains",
    "stem_lite",
    "tokenize",
    "tokens_match",
]
