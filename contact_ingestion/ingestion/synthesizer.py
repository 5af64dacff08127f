"""Build spreadsheet uploads from manually entered contacts."""
from __future__ import annotations

import datetime
import io
import logging
import re
import time
import zipfile
from typing import Iterable, List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.packaging.core import DocumentProperties
from openpyxl.xml.functions import tostring

from ..models import EMAIL, PHONE, ClassifiedContact, ColumnMapping, SynthesizedArtifact, UploadTypeSchema
from .columns import resolve_columns

LOGGER = logging.getLogger(__name__)

SHEET_NAME = "Contacts"

_WHITESPACE = re.compile(r"\s")
_FIXED_TIMESTAMP = datetime.datetime(2000, 1, 1)
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)
_CORE_PROPERTIES_MEMBER = "docProps/core.xml"

Row = List[str]


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE.sub("", value)


def build_row(contact: ClassifiedContact, width: int, mapping: ColumnMapping) -> Row:
    """Place one contact into an otherwise empty row of ``width`` cells."""

    row: Row = [""] * width
    if contact.kind == EMAIL and mapping.email_column_index is not None:
        row[mapping.email_column_index] = contact.original
    elif contact.kind == PHONE and mapping.phone_column_index is not None:
        row[mapping.phone_column_index] = _strip_whitespace(contact.original)
    elif contact.kind == PHONE:
        row[0] = _strip_whitespace(contact.original)
    else:
        row[0] = contact.original
    return row


def build_rows(contacts: Iterable[ClassifiedContact], schema: UploadTypeSchema) -> List[Row]:
    """Return the header row followed by one row per valid contact."""

    columns = list(schema.require_columns())
    mapping = resolve_columns(columns)
    rows: List[Row] = [columns]

    for contact in contacts:
        if not contact.is_valid:
            LOGGER.debug("Skipping invalid contact %r", contact.original)
            continue
        rows.append(build_row(contact, len(columns), mapping))
    return rows


def synthesize(
    valid_contacts: Sequence[ClassifiedContact],
    schema: UploadTypeSchema,
    *,
    timestamp_ms: Optional[int] = None,
) -> SynthesizedArtifact:
    """Serialise valid contacts into an ``.xlsx`` upload for ``schema``.

    The workbook bytes depend only on the contacts and the schema. The
    timestamp only appears in the suggested file name.
    """

    rows = build_rows(valid_contacts, schema)
    content = _rows_to_xlsx(rows)

    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)

    LOGGER.info(
        "Synthesized %s contact rows for upload type %s (%s bytes)",
        len(rows) - 1,
        schema.upload_type,
        len(content),
    )
    return SynthesizedArtifact(
        content=content,
        filename=f"manual_input_{timestamp_ms}.xlsx",
        upload_type=schema.upload_type,
        row_count=len(rows) - 1,
    )


def _fixed_properties() -> DocumentProperties:
    return DocumentProperties(creator="contact_ingestion", created=_FIXED_TIMESTAMP, modified=_FIXED_TIMESTAMP)


def _rows_to_xlsx(rows: Sequence[Row]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_NAME

    for row_index, row in enumerate(rows, start=1):
        for column_index, value in enumerate(row, start=1):
            if value == "":
                continue
            cell = sheet.cell(row=row_index, column=column_index, value=value)
            # stored as text, never as a formula
            if cell.data_type == "f":
                cell.data_type = "s"

    workbook.properties = _fixed_properties()
    buffer = io.BytesIO()
    workbook.save(buffer)
    return _normalise_archive(buffer.getvalue())


def _normalise_archive(raw: bytes) -> bytes:
    """Rewrite the xlsx container with fixed timestamps so output is reproducible."""

    output = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(raw)) as source, zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED) as target:
        for info in source.infolist():
            data = source.read(info.filename)
            if info.filename == _CORE_PROPERTIES_MEMBER:
                data = tostring(_fixed_properties().to_tree())
            member = zipfile.ZipInfo(info.filename, date_time=_ZIP_EPOCH)
            member.compress_type = zipfile.ZIP_DEFLATED
            member.external_attr = 0o600 << 16
            target.writestr(member, data)
    return output.getvalue()


__all__ = ["SHEET_NAME", "build_row", "build_rows", "synthesize"]
