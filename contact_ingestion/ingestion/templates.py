"""Downloadable CSV templates derived from upload type schemas."""
from __future__ import annotations

from typing import Iterable

from ..models import TemplateArtifact, UploadTypeSchema

BOM = "\ufeff"
DELIMITER = ","

_NEEDS_QUOTING = (DELIMITER, '"', "\n", "\r")


def escape_field(value: str) -> str:
    """Quote ``value`` if it contains a delimiter, quote or line break."""

    text = str(value)
    if any(marker in text for marker in _NEEDS_QUOTING):
        return '"' + text.replace('"', '""') + '"'
    return text


def _join(values: Iterable[str]) -> str:
    return DELIMITER.join(escape_field(value) for value in values)


def emit_template(schema: UploadTypeSchema) -> TemplateArtifact:
    """Build ``<upload_type>_template.csv`` with a header and one blank row."""

    columns = schema.require_columns()
    header = _join(columns)
    example = _join("" for _ in columns)
    text = f"{BOM}{header}\n{example}\n"
    return TemplateArtifact(
        content=text.encode("utf-8"),
        filename=f"{schema.upload_type}_template.csv",
    )


__all__ = ["BOM", "DELIMITER", "emit_template", "escape_field"]
