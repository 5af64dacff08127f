import io

import pandas as pd
import pytest
from openpyxl import load_workbook

from contact_ingestion.ingestion.classifier import classify_contact
from contact_ingestion.ingestion.gate import evaluate
from contact_ingestion.ingestion.synthesizer import SHEET_NAME, build_rows, synthesize
from contact_ingestion.models import XLSX_CONTENT_TYPE, SchemaMissingColumnsError, UploadTypeSchema
from contact_ingestion.registry import normalise_columns


def _read_rows(content: bytes):
    workbook = load_workbook(io.BytesIO(content))
    sheet = workbook[SHEET_NAME]
    return [list(row) for row in sheet.iter_rows(values_only=True)]


def _contacts(*lines):
    return [classify_contact(line) for line in lines]


def test_contacts_are_placed_in_matching_columns():
    schema = UploadTypeSchema("contacts", expected_columns=("Name", "Email", "Phone"))

    rows = build_rows(_contacts("a@b.com", "+1 234 567 890"), schema)

    assert rows == [
        ["Name", "Email", "Phone"],
        ["", "a@b.com", ""],
        ["", "", "+1234567890"],
    ]


def test_contacts_fall_back_to_first_column():
    schema = UploadTypeSchema("generic", expected_columns=("Contact", "Notes"))

    rows = build_rows(_contacts("a@b.com", "+33 6 12 34 56 78"), schema)

    assert rows[1] == ["a@b.com", ""]
    assert rows[2] == ["+33612345678", ""]


def test_email_without_email_column_uses_first_column_even_with_phone_column():
    schema = UploadTypeSchema("sms", expected_columns=("Name", "Mobile"))

    rows = build_rows(_contacts("a@b.com", "0612345678"), schema)

    assert rows[1] == ["a@b.com", ""]
    assert rows[2] == ["", "0612345678"]


def test_invalid_contacts_are_skipped():
    schema = UploadTypeSchema("contacts", expected_columns=("Email",))

    rows = build_rows(_contacts("a@b.com", "nope"), schema)

    assert rows == [["Email"], ["a@b.com"]]


def test_synthesize_produces_xlsx_with_schema_header():
    schema = UploadTypeSchema("contacts", expected_columns=("Name", "Email", "Phone", "Notes"))
    outcome = evaluate("a@b.com\n+1 (555) 123-4567\nbad\nc@d.org")

    artifact = synthesize(outcome.valid, schema, timestamp_ms=1700000000000)

    assert artifact.filename == "manual_input_1700000000000.xlsx"
    assert artifact.content_type == XLSX_CONTENT_TYPE
    assert artifact.upload_type == "contacts"
    assert artifact.row_count == 3

    rows = _read_rows(artifact.content)
    assert rows[0] == ["Name", "Email", "Phone", "Notes"]
    assert len(rows) == 4
    assert all(len(row) == 4 for row in rows)
    assert rows[1] == [None, "a@b.com", None, None]
    assert rows[2] == [None, None, "+1(555)123-4567", None]
    assert rows[3] == [None, "c@d.org", None, None]


def test_synthesize_can_be_read_with_pandas():
    schema = UploadTypeSchema("contacts", expected_columns=normalise_columns({"Email": {}, "Phone": {}}))
    artifact = synthesize(_contacts("a@b.com"), schema)

    frame = pd.read_excel(io.BytesIO(artifact.content), sheet_name=SHEET_NAME, dtype=str)

    assert list(frame.columns) == ["Email", "Phone"]
    assert frame.loc[0, "Email"] == "a@b.com"


def test_synthesize_is_byte_for_byte_reproducible():
    schema = UploadTypeSchema("contacts", expected_columns=("Name", "Email", "Phone"))
    contacts = _contacts("a@b.com", "+1234567890", "x@y.io")

    first = synthesize(contacts, schema, timestamp_ms=1)
    second = synthesize(contacts, schema, timestamp_ms=2)

    assert first.content == second.content
    assert first.filename != second.filename


def test_formula_like_values_are_stored_as_text():
    schema = UploadTypeSchema("contacts", expected_columns=("Email",))

    artifact = synthesize(_contacts("=cmd|x@evil.com"), schema)

    assert _read_rows(artifact.content)[1] == ["=cmd|x@evil.com"]


def test_schema_without_columns_is_rejected():
    schema = UploadTypeSchema("empty")

    with pytest.raises(SchemaMissingColumnsError):
        synthesize(_contacts("a@b.com"), schema)
