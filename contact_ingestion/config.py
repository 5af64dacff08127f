"""Configuration helpers for loading upload type registries from disk."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Union

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

ConfigData = Union[Dict[str, Any], List[Any]]


def load_configuration(path: str | Path) -> ConfigData:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc

    try:
        import yaml  # type: ignore
    except ImportError as exc:  # pragma: no cover - dependency optional
        raise ConfigurationError(
            "YAML configuration requires the 'pyyaml' package to be installed"
        ) from exc

    try:
        return yaml.safe_load(text) or {}  # type: ignore[no-any-return]
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' is not valid YAML: {exc}") from exc


def iter_upload_type_records(config: ConfigData, *, active_only: bool = True) -> Iterable[Mapping[str, Any]]:
    """Yield raw upload type records from a loaded configuration document.

    The document is either ``{"upload_types": [...]}`` or a bare list of
    records. Records marked ``is_active: false`` are skipped unless
    ``active_only`` is disabled.
    """

    if isinstance(config, Mapping):
        records = config.get("upload_types", [])
    else:
        records = config

    if not isinstance(records, list):
        raise ConfigurationError("'upload_types' must be a list of upload type records")

    for record in records:
        if not isinstance(record, Mapping):
            raise ConfigurationError(f"Upload type records must be mappings, got {type(record).__name__}")
        if not record.get("upload_type"):
            raise ConfigurationError("Upload type record missing required 'upload_type' field")
        if active_only and not record.get("is_active", True):
            LOGGER.debug("Skipping inactive upload type %s", record.get("upload_type"))
            continue
        yield record
