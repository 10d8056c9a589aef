"""Shared helpers for word and pattern normalization."""

from __future__ import annotations

import re

from ..core.constants import MAX_SLOT_LENGTH, MIN_SLOT_LENGTH, WILDCARD

WORD_RE = re.compile(r"^[a-z]+$")
PATTERN_RE = re.compile(rf"^[a-z{re.escape(WILDCARD)}]+$")


def clean_word(text: str) -> str:
    """Return the lowercase, whitespace-trimmed form of ``text``."""

    if not text:
        return ""
    return text.strip().lower()


def is_fill_word(word: str, min_length: int = MIN_SLOT_LENGTH, max_length: int = MAX_SLOT_LENGTH) -> bool:
    """True when ``word`` is already clean and alphabetic within the length range."""

    return min_length <= len(word) <= max_length and bool(WORD_RE.match(word))


def normalize_pattern(pattern: str) -> str:
    """Lowercase a pattern; wildcards are kept as is."""

    return pattern.strip().lower()


def is_valid_pattern(pattern: str) -> bool:
    return bool(PATTERN_RE.match(pattern))


__all__ = ["clean_word", "is_fill_word", "normalize_pattern", "is_valid_pattern", "WORD_RE"]
