"""Accent- and case-insensitive text matching used by showtime search."""

import re
import unicodedata
from typing import Optional

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")


def normalize(text: Optional[str]) -> str:
    """
    Fold text for search comparison.

    Lower-cases, decomposes to NFD, drops combining diacritical marks and
    maps the Vietnamese đ/Đ (which have no NFD decomposition) to d.

    Args:
        text: Raw text, may be None

    Returns:
        Folded text; normalize(normalize(x)) == normalize(x)
    """
    if not text:
        return ""
    folded = unicodedata.normalize("NFD", text.lower())
    folded = _COMBINING_MARKS.sub("", folded)
    return folded.replace("đ", "d")


def contains_normalized(haystack: Optional[str], needle: Optional[str]) -> bool:
    """Check whether the folded needle occurs inside the folded haystack."""
    return normalize(needle) in normalize(haystack)
