"""Text normalization and tokenization for phrase search.

Transcripts and search phrases are reduced to a canonical form before they
are compared: lowercase, no diacritics, and only letters, digits and
apostrophes separated by single spaces.
"""

from __future__ import annotations

import re
import unicodedata

_SPACE_RUN = re.compile(r" +")

_SEPARATORS = frozenset("-_")


def normalize(raw: str | None) -> str:
    """Normalize text for search.

    Lowercases, strips diacritics (``"café"`` -> ``"cafe"``), turns dashes,
    underscores and whitespace into spaces, keeps letters, digits and
    apostrophes, drops all other punctuation, then collapses and trims
    spaces. Normalizing an already normalized string returns it unchanged.

    Args:
        raw: Text to normalize; None and blank strings are allowed

    Returns:
        Normalized text, or "" for empty input
    """
    if not raw or raw.isspace():
        return ""

    decomposed = unicodedata.normalize("NFD", raw.lower())
    chars = []

    for ch in decomposed:
        if unicodedata.category(ch) == "Mn":
            continue
        if ch in _SEPARATORS or ch.isspace():
            chars.append(" ")
        elif ch.isalpha() or ch.isdecimal() or ch == "'":
            chars.append(ch)

    return _SPACE_RUN.sub(" ", "".join(chars)).strip()


def tokenize(normalized: str) -> list[str]:
    """Split normalized text into tokens, never yielding empty tokens."""
    return [token for token in normalized.split(" ") if token]


def stem_lite(token: str) -> str:
    """Reduce a token to a coarse base form.

    Drops a possessive ``'s``, or a plural ``s`` on tokens longer than three
    characters. Short words such as "is" or "was" are left alone.
    """
    if token.endswith("'s"):
        return token[:-2]
    if len(token) > 3 and token.endswith("s"):
        return token[:-1]
    return token
