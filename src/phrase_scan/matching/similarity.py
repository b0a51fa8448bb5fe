"""Token similarity for fuzzy phrase matching.

Two tokens match when they are equal, share a lite stem, or are within a
bounded Levenshtein distance of each other after stemming.
"""

from __future__ import annotations

from phrase_scan.matching.text import stem_lite

# Phrase tokens this short must match exactly (after stemming)
SHORT_TOKEN_LENGTH = 2


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein distance between two strings.

    The minimum number of single-character insertions, deletions and
    substitutions needed to turn one string into the other.

    Args:
        s1: First string
        s2: Second string

    Returns:
        Number of edits needed
    """
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    current_row = [0] * (len(s2) + 1)

    for i, c1 in enumerate(s1):
        current_row[0] = i + 1

        for j, c2 in enumerate(s2):
            current_row[j + 1] = min(
                previous_row[j + 1] + 1,  # deletion
                current_row[j] + 1,  # insertion
                previous_row[j] + (c1 != c2),  # substitution
            )

        previous_row, current_row = current_row, previous_row

    return previous_row[len(s2)]


def tokens_match(a: str, b: str, max_distance: int) -> bool:
    """Decide whether two normalized tokens are close enough.

    Checked in order: exact equality, equal stems, then edit distance
    between the stems. A ``max_distance`` of zero or less disables the
    edit distance check, as does a phrase token of two characters or fewer.

    Args:
        a: Token from the transcript
        b: Token from the search phrase
        max_distance: Maximum edit distance allowed between stems

    Returns:
        True if the tokens match
    """
    if a == b:
        return True

    stem_a = stem_lite(a)
    stem_b = stem_lite(b)
    if stem_a == stem_b:
        return True

    max_distance = effective_max_distance(b, max_distance)
    if max_distance <= 0:
        return False
    return levenshtein_distance(stem_a, stem_b) <= max_distance


def effective_max_distance(phrase_token: str, max_distance: int) -> int:
    """Edit distance allowed for one phrase token.

    Words of one or two characters ("a", "to", "of") get no tolerance at all.
    """
    if len(phrase_token) <= SHORT_TOKEN_LENGTH:
        return 0
    return max_distance
