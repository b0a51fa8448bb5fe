"""Soft phrase containment.

A phrase is softly contained in a text when some run of consecutive tokens
in the text matches the phrase token for token, allowing stemming and a
small edit distance per token.
"""

from __future__ import annotations

from phrase_scan.matching.similarity import effective_max_distance, tokens_match
from phrase_scan.matching.text import normalize, tokenize


def _window_matches(
    window: list[str],
    phrase_tokens: list[str],
    max_distance: int,
) -> bool:
    for token, phrase_token in zip(window, phrase_tokens):
        if not tokens_match(token, phrase_token, effective_max_distance(phrase_token, max_distance)):
            return False
    return True


def soft_contains(
    haystack_raw: str,
    phrase_normalized: str,
    max_distance: int,
    allow_substring: bool,
) -> bool:
    """Check whether a raw text contains a normalized phrase.

    The haystack is normalized first. With ``allow_substring`` a literal
    substring hit on the normalized text is accepted straight away, so
    "brown" also finds "brownie". Otherwise every token offset is tried and
    the first window whose tokens all match wins.

    Args:
        haystack_raw: Text to search, in any form
        phrase_normalized: Phrase already passed through ``normalize``
        max_distance: Maximum edit distance per token
        allow_substring: Accept literal substring containment

    Returns:
        True if the phrase was found
    """
    haystack = normalize(haystack_raw)
    if allow_substring and phrase_normalized and phrase_normalized in haystack:
        return True

    haystack_tokens = tokenize(haystack)
    phrase_tokens = tokenize(phrase_normalized)
    if not phrase_tokens or len(haystack_tokens) < len(phrase_tokens):
        return False

    width = len(phrase_tokens)
    for offset in range(len(haystack_tokens) - width + 1):
        if _window_matches(haystack_tokens[offset:offset + width], phrase_tokens, max_distance):
            return True

    return False
