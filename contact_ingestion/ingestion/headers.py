"""Check the header row of an uploaded spreadsheet against its schema."""
from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Any, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import ErrorKind, UnsupportedFileTypeError, UploadTypeSchema, ValidationIssue

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_header(
    path: PathLike,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[str]:
    """Return the column names of a CSV/TSV or Excel file without loading rows.

    Upload checks only accept Excel files; the CSV/TSV branch serves direct
    callers validating filled-in templates. Files that cannot be parsed raise
    :class:`UnsupportedFileTypeError`.

    Parameters
    ----------
    path:
        Path to the uploaded file.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for CSV files.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.
    """

    loader_kwargs = dict(loader_kwargs or {})
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in {".csv", ".tsv", ".txt"}:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        loader_kwargs.setdefault("encoding", "utf-8-sig")
        reader = pd.read_csv
    elif suffix in {".xls", ".xlsx", ".xlsm"}:
        loader_kwargs["engine"] = loader_kwargs.get("engine") or ("xlrd" if suffix == ".xls" else "openpyxl")
        loader_kwargs["sheet_name"] = sheet_name
        reader = pd.read_excel
    else:
        raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")

    try:
        frame = reader(path_obj, nrows=0, **loader_kwargs)
    except (ValueError, OSError, zipfile.BadZipFile, ImportError) as exc:
        LOGGER.debug("Could not read header of %s", path_obj, exc_info=True)
        raise UnsupportedFileTypeError(f"Could not read {path_obj.name} as a {suffix} file") from exc

    return [str(column).strip() for column in frame.columns]


def _normalise(name: str) -> str:
    return str(name).strip().lower()


def check_header(columns: Sequence[str], schema: UploadTypeSchema) -> List[ValidationIssue]:
    """Compare file columns with the schema's strictness rules."""

    present = {_normalise(column) for column in columns}
    expected = {_normalise(column) for column in schema.expected_columns}
    issues: List[ValidationIssue] = []

    if schema.require_all_columns:
        missing = [column for column in schema.expected_columns if _normalise(column) not in present]
        if missing:
            issues.append(
                ValidationIssue(
                    ErrorKind.MISSING_COLUMNS,
                    "file",
                    f"Missing required columns: {', '.join(missing)}",
                )
            )

    if not schema.allow_extra_columns:
        extra = [column for column in columns if _normalise(column) not in expected]
        if extra:
            issues.append(
                ValidationIssue(
                    ErrorKind.UNEXPECTED_COLUMNS,
                    "file",
                    f"Unexpected columns: {', '.join(extra)}",
                )
            )

    return issues


__all__ = ["check_header", "read_header"]
