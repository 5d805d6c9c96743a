"""Employer key normalization.

The key is the join condition between grouped source reports and existing
target rows, so both sides must go through :func:`normalize_company_key`.
"""

import re
import unicodedata
from typing import Any

UNKNOWN_KEY = "unknown"

CORPORATE_SUFFIXES = ("ltd", "pvt", "private", "inc", "llc", "co", "company")

# Suffixes are whole words bounded by anything but ASCII alphanumerics, so a
# second pass over an existing key is a no-op
_SUFFIX_PATTERN = re.compile(
    r"(?<![A-Za-z0-9])(?:" + "|".join(CORPORATE_SUFFIXES) + r")(?![A-Za-z0-9])",
    re.IGNORECASE,
)
_NON_ALNUM_PATTERN = re.compile(r"[^A-Za-z0-9]+")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """Decompose ``text`` (NFKD) and drop combining marks."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_company_key(name: Any) -> str:
    """Canonicalize an employer display name into an EmployerKey.

    Examples:
        >>> normalize_company_key("Acme Inc.")
        'acme'
        >>> normalize_company_key("  Café Müller & Co ")
        'cafe-muller'
        >>> normalize_company_key(None)
        'unknown'
    """
    if name is None:
        return UNKNOWN_KEY

    text = str(name)
    if not text.strip():
        return UNKNOWN_KEY

    text = strip_diacritics(text)
    text = _SUFFIX_PATTERN.sub("", text)
    text = _NON_ALNUM_PATTERN.sub(" ", text)
    text = text.strip().lower()
    key = _WHITESPACE_PATTERN.sub("-", text)

    return key or UNKNOWN_KEY
