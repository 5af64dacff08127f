"""Top-level package for contact list ingestion and schema normalisation."""

from . import models  # noqa: F401
from .debounce import DebouncedValidator, DebounceState, uniqueness_check  # noqa: F401
from .models import (
    ClassifiedContact,
    ColumnMapping,
    ErrorKind,
    FileSelection,
    IngestionError,
    SchemaMissingColumnsError,
    SubmissionCheck,
    SynthesizedArtifact,
    TemplateArtifact,
    UploadTypeSchema,
    ValidationIssue,
    ValidationOutcome,
)
from .registry import UploadTypeRegistry  # noqa: F401

__all__ = [
    "ClassifiedContact",
    "ColumnMapping",
    "DebouncedValidator",
    "DebounceState",
    "ErrorKind",
    "FileSelection",
    "IngestionError",
    "SchemaMissingColumnsError",
    "SubmissionCheck",
    "SynthesizedArtifact",
    "TemplateArtifact",
    "UploadTypeRegistry",
    "UploadTypeSchema",
    "ValidationIssue",
    "ValidationOutcome",
    "uniqueness_check",
    "ingestion",
]
