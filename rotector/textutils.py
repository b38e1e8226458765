"""Text normalisation used for loose string matching."""

from __future__ import annotations

import unicodedata


def normalize_string(s: str) -> str:
    """Strip diacritics and whitespace and lower-case the text."""
    if not s:
        return ""
    text = unicodedata.normalize("NFKC", s)
    text = unicodedata.normalize("NFD", text)
    text = "".join(
        ch for ch in text if unicodedata.category(ch) != "Mn" and not ch.isspace()
    )
    return unicodedata.normalize("NFC", text.lower())


def contains_normalized(s: str, substr: str) -> bool:
    """Report whether ``substr`` occurs in ``s`` after normalising both."""
    if not s or not substr:
        return False
    normalized_s = normalize_string(s)
    normalized_substr = normalize_string(substr)
    if not normalized_s or not normalized_substr:
        return False
    return normalized_substr in normalized_s