"""Access to the upload type schemas known to the ingestion engine."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import ConfigData, iter_upload_type_records, load_configuration
from .models import UnknownUploadTypeError, UploadTypeSchema

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE_MB = 10


def normalise_columns(value: Any) -> Tuple[str, ...]:
    """Return ``expected_columns`` as an ordered tuple of column names.

    Registries describe columns either as a list or as a mapping keyed by
    column name; for mappings the key order is the column order.
    """

    if isinstance(value, Mapping):
        return tuple(str(key) for key in value.keys())
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return ()


def _coerce_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _coerce_size(value: Any) -> float:
    try:
        size = float(value)
    except (TypeError, ValueError):
        return DEFAULT_MAX_FILE_SIZE_MB
    return size if size > 0 else DEFAULT_MAX_FILE_SIZE_MB


def schema_from_record(record: Mapping[str, Any]) -> UploadTypeSchema:
    """Build an :class:`UploadTypeSchema` from a raw registry record.

    Both the flat configuration shape and the nested schema shape
    (``validation_rules`` / ``file_constraints``) are accepted.
    """

    rules: Mapping[str, Any] = record.get("validation_rules") or {}
    constraints: Mapping[str, Any] = record.get("file_constraints") or {}

    allow_extra = rules.get("allow_extra_columns", record.get("allow_extra_columns"))
    require_all = rules.get("require_all_columns", record.get("require_all_columns"))
    max_size = constraints.get("max_file_size_mb", record.get("max_file_size_mb"))
    ttl = record.get("cache_ttl_seconds")

    return UploadTypeSchema(
        upload_type=str(record["upload_type"]),
        expected_columns=normalise_columns(record.get("expected_columns")),
        allow_extra_columns=_coerce_bool(allow_extra, True),
        require_all_columns=_coerce_bool(require_all, False),
        max_file_size_mb=_coerce_size(max_size),
        description=record.get("description"),
        cache_ttl_seconds=int(ttl) if ttl is not None else None,
        is_active=_coerce_bool(record.get("is_active"), True),
    )


class UploadTypeRegistry:
    """Ordered collection of upload type schemas keyed by ``upload_type``."""

    def __init__(self, schemas: Iterable[UploadTypeSchema] = ()) -> None:
        self._schemas: Dict[str, UploadTypeSchema] = {}
        for schema in schemas:
            if schema.upload_type in self._schemas:
                LOGGER.warning("Duplicate upload type %s - keeping the last definition", schema.upload_type)
            self._schemas[schema.upload_type] = schema

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "UploadTypeRegistry":
        return cls(schema_from_record(record) for record in records)

    @classmethod
    def from_configuration(cls, config: ConfigData) -> "UploadTypeRegistry":
        return cls.from_records(iter_upload_type_records(config, active_only=False))

    @classmethod
    def from_file(cls, path: str | Path) -> "UploadTypeRegistry":
        registry = cls.from_configuration(load_configuration(path))
        LOGGER.debug("Loaded %s upload types from %s", len(registry), path)
        return registry

    def __len__(self) -> int:
        return len(self._schemas)

    def __contains__(self, upload_type: object) -> bool:
        return upload_type in self._schemas

    def get(self, upload_type: Optional[str]) -> Optional[UploadTypeSchema]:
        if not upload_type:
            return None
        return self._schemas.get(upload_type)

    def require(self, upload_type: Optional[str]) -> UploadTypeSchema:
        schema = self.get(upload_type)
        if schema is None:
            raise UnknownUploadTypeError(f"Unknown upload type '{upload_type}'")
        return schema

    def upload_types(self, *, active_only: bool = True) -> List[str]:
        return [key for key, schema in self._schemas.items() if schema.is_active or not active_only]

    def default_upload_type(self) -> Optional[str]:
        """Return the first active upload type, used as the initial selection."""

        active = self.upload_types()
        return active[0] if active else None


__all__ = [
    "DEFAULT_MAX_FILE_SIZE_MB",
    "UploadTypeRegistry",
    "normalise_columns",
    "schema_from_record",
]
