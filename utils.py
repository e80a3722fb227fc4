"""Utility functions shared by the alignment, matching and session services."""

import math

from constants import PUNCTUATION

_PUNCTUATION_TABLE = str.maketrans("", "", PUNCTUATION)


def normalize_text(text: object) -> str:
    """Lowercase, strip the fixed punctuation set and collapse whitespace.

    Non-text input normalizes to an empty string so callers never have to guard.
    """
    if not isinstance(text, str):
        return ""
    return " ".join(text.lower().translate(_PUNCTUATION_TABLE).split())


def split_words(text: object) -> list[str]:
    """Whitespace-split raw text, keeping punctuation for display."""
    if not isinstance(text, str):
        return []
    return text.split()


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (ties go up, not to even)."""
    return math.floor(value + 0.5)


def percentage(part: int, whole: int) -> int:
    """Integer percentage, 0 when there is nothing to measure."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def strip_punctuation(text: object) -> str:
    """Remove the fixed punctuation set, keeping case, for display forms of a word."""
    if not isinstance(text, str):
        return ""
    return " ".join(text.translate(_PUNCTUATION_TABLE).split())
