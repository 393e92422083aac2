"""Normalization, validation and fingerprinting of chunk text."""

import hashlib
import re

DEFAULT_MIN_LENGTH = 10
DEFAULT_MAX_LENGTH = 10000

_NON_WORD = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")
_SIGNIFICANT = re.compile(r"[a-zA-Z0-9а-яА-ЯёЁ]")


def normalize(text: str) -> str:
    """Reduce text to its comparable form.

    Punctuation and symbols are removed, whitespace runs collapse to a
    single space, the result is trimmed and lower-cased. Two texts that only
    differ in casing, punctuation or spacing normalize identically.
    """
    text = _NON_WORD.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    return text.strip().lower()


def is_valid(
    text: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> bool:
    """Check whether text is worth embedding."""
    clean = normalize(text)
    if not min_length <= len(clean) <= max_length:
        return False
    return _SIGNIFICANT.search(clean) is not None


def fingerprint(text: str) -> str:
    """SHA-256 hex digest of the normalized text."""
    return hashlib.sha256(normalize(text).encode("utf-8")).hexdigest()
