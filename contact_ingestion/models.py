"""Data models shared by the contact ingestion engine and its controllers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_CONTENT_TYPE = "application/vnd.ms-excel"
CSV_CONTENT_TYPE = "text/csv;charset=utf-8"

EMAIL = "email"
PHONE = "phone"
INVALID = "invalid"


# --- Errors ---

class ErrorKind(str, Enum):
    """Categories of user-facing validation failures."""

    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    FILE_TOO_LARGE = "FileTooLarge"
    SCHEMA_MISSING_COLUMNS = "SchemaMissingColumns"
    NO_VALID_CONTACTS = "NoValidContacts"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    MISSING_COLUMNS = "MissingColumns"
    UNEXPECTED_COLUMNS = "UnexpectedColumns"


class IngestionError(ValueError):
    """Base class for errors raised by the ingestion engine."""

    kind: Optional[ErrorKind] = None


class SchemaMissingColumnsError(IngestionError):
    """Raised when an upload type schema defines no usable columns."""

    kind = ErrorKind.SCHEMA_MISSING_COLUMNS


class UnknownUploadTypeError(IngestionError):
    """Raised when an upload type key is not present in the registry."""

    kind = ErrorKind.MISSING_REQUIRED_FIELD


class UnsupportedFileTypeError(IngestionError):
    """Raised when a file cannot be read as a tabular upload."""

    kind = ErrorKind.UNSUPPORTED_FORMAT


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """An inline validation message attached to a form field."""

    kind: ErrorKind
    field: str
    message: str


# --- Schema ---

@dataclass(frozen=True, slots=True)
class UploadTypeSchema:
    """Declarative contract for a category of tabular contact uploads."""

    upload_type: str
    expected_columns: Tuple[str, ...] = ()
    allow_extra_columns: bool = True
    require_all_columns: bool = False
    max_file_size_mb: float = 10
    description: Optional[str] = None
    cache_ttl_seconds: Optional[int] = None
    is_active: bool = True

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)

    def require_columns(self) -> Tuple[str, ...]:
        """Return the expected columns or raise if there are none."""

        if not self.expected_columns:
            raise SchemaMissingColumnsError(
                f"No expected columns defined for upload type '{self.upload_type}'"
            )
        return self.expected_columns


# --- Classification ---

@dataclass(frozen=True, slots=True)
class ClassifiedContact:
    """A single line of freehand input together with its detected kind."""

    original: str
    kind: str

    @property
    def is_valid(self) -> bool:
        return self.kind in (EMAIL, PHONE)


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Column indices that receive email and phone values."""

    email_column_index: Optional[int] = None
    phone_column_index: Optional[int] = None


@dataclass(slots=True)
class ValidationOutcome:
    """Partition of freehand input into valid and invalid contacts."""

    valid: List[ClassifiedContact] = field(default_factory=list)
    invalid: List[ClassifiedContact] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return len(self.valid)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid)


# --- Files and artifacts ---

@dataclass(frozen=True, slots=True)
class FileSelection:
    """Metadata declared for a file chosen by the user."""

    name: str
    size_bytes: int
    content_type: str = ""


@dataclass(slots=True)
class SubmissionCheck:
    """Result of checking whether a submission may proceed."""

    issues: List[ValidationIssue] = field(default_factory=list)
    outcome: Optional[ValidationOutcome] = None

    @property
    def can_submit(self) -> bool:
        return not self.issues

    def messages_for(self, field_name: str) -> List[str]:
        return [issue.message for issue in self.issues if issue.field == field_name]


@dataclass(frozen=True, slots=True)
class SynthesizedArtifact:
    """Spreadsheet built from manually entered contacts."""

    content: bytes
    filename: str
    upload_type: str
    row_count: int
    content_type: str = XLSX_CONTENT_TYPE


@dataclass(frozen=True, slots=True)
class TemplateArtifact:
    """Downloadable skeleton file for an upload type."""

    content: bytes
    filename: str
    content_type: str = CSV_CONTENT_TYPE

    def text(self) -> str:
        return self.content.decode("utf-8")


__all__ = [
    "EMAIL",
    "PHONE",
    "INVALID",
    "XLSX_CONTENT_TYPE",
    "XLS_CONTENT_TYPE",
    "CSV_CONTENT_TYPE",
    "ErrorKind",
    "IngestionError",
    "SchemaMissingColumnsError",
    "UnknownUploadTypeError",
    "UnsupportedFileTypeError",
    "ValidationIssue",
    "UploadTypeSchema",
    "ClassifiedContact",
    "ColumnMapping",
    "ValidationOutcome",
    "FileSelection",
    "SubmissionCheck",
    "SynthesizedArtifact",
    "TemplateArtifact",
]
