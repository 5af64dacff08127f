"""Syntactic classification of freehand contact lines."""
from __future__ import annotations

import re

from ..models import EMAIL, INVALID, PHONE, ClassifiedContact

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[+]?[0-9\s()\-]{8,}")


def classify(line: str) -> str:
    """Return ``"email"``, ``"phone"`` or ``"invalid"`` for a trimmed line.

    Only the shape of the text is checked; no DNS or carrier lookups happen.
    """

    if not isinstance(line, str):
        return INVALID
    if EMAIL_PATTERN.fullmatch(line):
        return EMAIL
    if PHONE_PATTERN.fullmatch(line):
        return PHONE
    return INVALID


def classify_contact(line: str) -> ClassifiedContact:
    return ClassifiedContact(original=line, kind=classify(line))


__all__ = ["EMAIL_PATTERN", "PHONE_PATTERN", "classify", "classify_contact"]
