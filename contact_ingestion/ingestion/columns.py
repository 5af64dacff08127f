"""Heuristics for locating contact columns in an upload type schema."""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..models import ColumnMapping

_EMAIL_MARKERS: Sequence[str] = ("email",)
_PHONE_MARKERS: Sequence[str] = ("phone", "mobile")


def _matches(column: str, markers: Iterable[str]) -> bool:
    column_lc = str(column).lower()
    return any(marker in column_lc for marker in markers)


def resolve_columns(columns: Sequence[str]) -> ColumnMapping:
    """Pick the columns that should receive email and phone values.

    The first column whose name contains ``email`` becomes the email column
    and the first containing ``phone`` or ``mobile`` the phone column. When
    several columns match a role, declaration order decides. A single column
    matching both markers serves both roles.
    """

    email_index: Optional[int] = None
    phone_index: Optional[int] = None

    for index, column in enumerate(columns):
        if email_index is None and _matches(column, _EMAIL_MARKERS):
            email_index = index
        if phone_index is None and _matches(column, _PHONE_MARKERS):
            phone_index = index
        if email_index is not None and phone_index is not None:
            break

    return ColumnMapping(email_column_index=email_index, phone_column_index=phone_index)


__all__ = ["resolve_columns"]
