"""Classification, validation, and spreadsheet synthesis for contact lists."""
from __future__ import annotations

from .classifier import classify, classify_contact
from .columns import resolve_columns
from .gate import (
    FILE_MODE,
    MANUAL_MODE,
    check_file,
    check_submission,
    evaluate,
    format_file_size,
    suggest_list_name,
)
from .headers import check_header, read_header
from .synthesizer import build_rows, synthesize
from .templates import emit_template, escape_field

__all__ = [
    "FILE_MODE",
    "MANUAL_MODE",
    "build_rows",
    "check_file",
    "check_header",
    "check_submission",
    "classify",
    "classify_contact",
    "emit_template",
    "escape_field",
    "evaluate",
    "format_file_size",
    "read_header",
    "resolve_columns",
    "suggest_list_name",
    "synthesize",
]
