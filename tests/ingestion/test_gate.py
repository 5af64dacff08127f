import pytest

from contact_ingestion.ingestion.gate import (
    FILE_MODE,
    MANUAL_MODE,
    check_file,
    check_submission,
    evaluate,
    format_file_size,
    suggest_list_name,
)
from contact_ingestion.models import (
    XLS_CONTENT_TYPE,
    XLSX_CONTENT_TYPE,
    ErrorKind,
    FileSelection,
    UploadTypeSchema,
)


@pytest.fixture()
def schema():
    return UploadTypeSchema(
        upload_type="contacts",
        expected_columns=("Name", "Email", "Phone"),
        max_file_size_mb=2,
    )


def test_evaluate_partitions_lines():
    raw = "john@example.com\n\n  +33612345678  \r\nnot-an-address\n   \n123\n"

    outcome = evaluate(raw)

    assert [c.original for c in outcome.valid] == ["john@example.com", "+33612345678"]
    assert [c.original for c in outcome.invalid] == ["not-an-address", "123"]
    assert outcome.valid_count == 2
    assert outcome.invalid_count == 2


def test_evaluate_is_repeatable():
    raw = "a@b.com\nbad\n+1 (555) 123-4567"

    assert evaluate(raw) == evaluate(raw)


def test_evaluate_splits_only_on_line_breaks():
    outcome = evaluate("a@b.com\x0cc@d.com\re@f.com")

    assert [c.original for c in outcome.valid] == ["e@f.com"]
    assert [c.original for c in outcome.invalid] == ["a@b.com\x0cc@d.com"]


def test_evaluate_blank_input():
    outcome = evaluate("  \n \n")

    assert outcome.valid == []
    assert outcome.invalid == []


def test_file_exactly_at_limit_is_accepted(schema):
    limit = 2 * 1024 * 1024

    assert check_file(FileSelection("list.xlsx", limit, XLSX_CONTENT_TYPE), schema) == []

    issues = check_file(FileSelection("list.xlsx", limit + 1, XLSX_CONTENT_TYPE), schema)
    assert [issue.kind for issue in issues] == [ErrorKind.FILE_TOO_LARGE]
    assert issues[0].message == "File size must be less than 2MB"


def test_unsupported_format_is_reported(schema):
    issues = check_file(FileSelection("list.csv", 10, "text/csv"), schema)

    assert [issue.kind for issue in issues] == [ErrorKind.UNSUPPORTED_FORMAT]
    assert issues[0].field == "file"


def test_content_type_is_guessed_from_extension(schema):
    assert check_file(FileSelection("legacy.XLS", 10), schema) == []
    assert check_file(FileSelection("list.xlsx", 10, XLS_CONTENT_TYPE + "; charset=binary"), schema) == []
    assert check_file(FileSelection("list.pdf", 10), schema)[0].kind is ErrorKind.UNSUPPORTED_FORMAT


def test_file_check_requires_schema():
    issues = check_file(FileSelection("list.xlsx", 10, XLSX_CONTENT_TYPE), None)

    assert issues[0].kind is ErrorKind.MISSING_REQUIRED_FIELD
    assert issues[0].field == "upload_type"


def test_manual_submission_allowed_with_valid_contacts(schema):
    check = check_submission(MANUAL_MODE, schema, "Newsletter", raw_text="a@b.com\nbad")

    assert check.can_submit
    assert check.outcome.valid_count == 1


def test_manual_submission_without_valid_contacts(schema):
    empty = check_submission(MANUAL_MODE, schema, "Newsletter", raw_text="   ")
    invalid_only = check_submission(MANUAL_MODE, schema, "Newsletter", raw_text="bad\n123")

    assert not empty.can_submit
    assert empty.messages_for("manual_input") == ["Please enter at least one email or phone number"]
    assert not invalid_only.can_submit
    assert invalid_only.messages_for("manual_input") == ["No valid emails or phone numbers found"]
    assert invalid_only.issues[0].kind is ErrorKind.NO_VALID_CONTACTS


def test_submission_requires_schema_and_name():
    check = check_submission(MANUAL_MODE, None, "  ", raw_text="a@b.com")

    assert not check.can_submit
    assert {issue.field for issue in check.issues} == {"upload_type", "name"}
    assert all(issue.kind is ErrorKind.MISSING_REQUIRED_FIELD for issue in check.issues)


def test_file_submission(schema):
    ok = check_submission(FILE_MODE, schema, "Q3", file=FileSelection("q3.xlsx", 100, XLSX_CONTENT_TYPE))
    missing = check_submission(FILE_MODE, schema, "Q3")
    too_big = check_submission(
        FILE_MODE, schema, "Q3", file=FileSelection("q3.xlsx", 3 * 1024 * 1024, XLSX_CONTENT_TYPE)
    )

    assert ok.can_submit
    assert ok.outcome is None
    assert missing.messages_for("file") == ["Please select a file"]
    assert [issue.kind for issue in too_big.issues] == [ErrorKind.FILE_TOO_LARGE]


def test_file_submission_without_schema_reports_upload_type_once():
    check = check_submission(FILE_MODE, None, "Q3", file=FileSelection("q3.xlsx", 100, XLSX_CONTENT_TYPE))

    assert [issue.field for issue in check.issues] == ["upload_type"]


def test_unknown_mode_is_rejected(schema):
    with pytest.raises(ValueError):
        check_submission("paste", schema, "x")


def test_suggest_list_name():
    assert suggest_list_name("march_customers.xlsx") == "march_customers"
    assert suggest_list_name("/tmp/report.final.xls") == "report.final"
    assert suggest_list_name("README") == "README"


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(512) == "512 Bytes"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(10 * 1024 * 1024) == "10 MB"
    assert format_file_size(1234567) == "1.18 MB"
