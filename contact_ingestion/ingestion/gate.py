"""Acceptance checks that decide whether a contact list can be submitted."""
from __future__ import annotations

import logging
import re
from pathlib import PurePath
from typing import List, Mapping, Optional

from ..models import (
    XLS_CONTENT_TYPE,
    XLSX_CONTENT_TYPE,
    ErrorKind,
    FileSelection,
    SubmissionCheck,
    UploadTypeSchema,
    ValidationIssue,
    ValidationOutcome,
)
from .classifier import classify_contact

LOGGER = logging.getLogger(__name__)

FILE_MODE = "file"
MANUAL_MODE = "manual"

ACCEPTED_CONTENT_TYPES = frozenset({XLSX_CONTENT_TYPE, XLS_CONTENT_TYPE})

_SUFFIX_CONTENT_TYPES: Mapping[str, str] = {
    ".xlsx": XLSX_CONTENT_TYPE,
    ".xls": XLS_CONTENT_TYPE,
}

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def evaluate(raw_text: str) -> ValidationOutcome:
    """Classify every non-blank line of ``raw_text``."""

    outcome = ValidationOutcome()
    if not raw_text or not raw_text.strip():
        return outcome

    for line in _LINE_BREAK.split(raw_text):
        text = line.strip()
        if not text:
            continue
        contact = classify_contact(text)
        if contact.is_valid:
            outcome.valid.append(contact)
        else:
            outcome.invalid.append(contact)

    LOGGER.debug("Evaluated manual input: %s valid, %s invalid", outcome.valid_count, outcome.invalid_count)
    return outcome


def _declared_content_type(selection: FileSelection) -> str:
    if selection.content_type:
        return selection.content_type.split(";", 1)[0].strip().lower()
    return _SUFFIX_CONTENT_TYPES.get(PurePath(selection.name).suffix.lower(), "")


def check_file(selection: FileSelection, schema: Optional[UploadTypeSchema]) -> List[ValidationIssue]:
    """Check the declared format and size of a selected file."""

    if _declared_content_type(selection) not in ACCEPTED_CONTENT_TYPES:
        return [
            ValidationIssue(
                ErrorKind.UNSUPPORTED_FORMAT,
                "file",
                "Please select a valid Excel file (.xlsx or .xls)",
            )
        ]

    if schema is None:
        return [
            ValidationIssue(
                ErrorKind.MISSING_REQUIRED_FIELD,
                "upload_type",
                "Please select an upload type first",
            )
        ]

    if selection.size_bytes > schema.max_file_size_bytes:
        return [
            ValidationIssue(
                ErrorKind.FILE_TOO_LARGE,
                "file",
                f"File size must be less than {schema.max_file_size_mb:g}MB",
            )
        ]

    return []


def check_submission(
    mode: str,
    schema: Optional[UploadTypeSchema],
    name: Optional[str],
    *,
    file: Optional[FileSelection] = None,
    raw_text: str = "",
) -> SubmissionCheck:
    """Collect every reason a submission would currently be refused.

    Nothing is raised: callers show the returned issues next to their
    fields and keep the submit action disabled while any remain.
    """

    if mode not in (FILE_MODE, MANUAL_MODE):
        raise ValueError(f"Unknown input mode '{mode}'")

    check = SubmissionCheck()

    if mode == FILE_MODE:
        if file is None:
            check.issues.append(
                ValidationIssue(ErrorKind.MISSING_REQUIRED_FIELD, "file", "Please select a file")
            )
        else:
            check.issues.extend(
                issue for issue in check_file(file, schema) if issue.field != "upload_type"
            )
    else:
        outcome = evaluate(raw_text)
        check.outcome = outcome
        if not raw_text.strip():
            check.issues.append(
                ValidationIssue(
                    ErrorKind.NO_VALID_CONTACTS,
                    "manual_input",
                    "Please enter at least one email or phone number",
                )
            )
        elif outcome.valid_count == 0:
            check.issues.append(
                ValidationIssue(
                    ErrorKind.NO_VALID_CONTACTS,
                    "manual_input",
                    "No valid emails or phone numbers found",
                )
            )

    if schema is None:
        check.issues.append(
            ValidationIssue(ErrorKind.MISSING_REQUIRED_FIELD, "upload_type", "Please select an upload type")
        )

    if not name or not name.strip():
        check.issues.append(ValidationIssue(ErrorKind.MISSING_REQUIRED_FIELD, "name", "Please enter a name"))

    return check


def suggest_list_name(filename: str) -> str:
    """Derive a default list name from a file name by dropping its extension."""

    name = PurePath(filename).name
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


def format_file_size(size_bytes: int) -> str:
    """Render a byte count for display, e.g. ``"1.5 KB"``."""

    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


__all__ = [
    "ACCEPTED_CONTENT_TYPES",
    "FILE_MODE",
    "MANUAL_MODE",
    "check_file",
    "check_submission",
    "evaluate",
    "format_file_size",
    "suggest_list_name",
]
