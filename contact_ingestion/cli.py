"""Command line interface for building contact uploads and templates."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .ingestion import (
    MANUAL_MODE,
    check_file,
    check_header,
    check_submission,
    emit_template,
    format_file_size,
    read_header,
    suggest_list_name,
    synthesize,
)
from .models import ErrorKind, FileSelection, IngestionError, UnsupportedFileTypeError, ValidationIssue
from .registry import UploadTypeRegistry

LOGGER = logging.getLogger(__name__)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Validate contact lists and build uploads that match an upload type schema",
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to the upload type registry file (YAML or JSON)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("types", help="List the active upload types")

    template = subparsers.add_parser("template", help="Write an empty CSV template for an upload type")
    template.add_argument("upload_type", help="Upload type key")
    template.add_argument("--output-dir", default=".", help="Directory the template is written to")

    build = subparsers.add_parser("build", help="Build an XLSX upload from emails and phone numbers")
    build.add_argument("upload_type", help="Upload type key")
    build.add_argument("input", help="Text file with one email or phone number per line ('-' for stdin)")
    build.add_argument("--name", default=None, help="List name (defaults to the input file name)")
    build.add_argument("--output-dir", default=".", help="Directory the upload is written to")

    check = subparsers.add_parser("check", help="Check a spreadsheet before uploading it")
    check.add_argument("upload_type", help="Upload type key")
    check.add_argument("file", help="Spreadsheet to check")
    check.add_argument("--content-type", default="", help="Declared MIME type (guessed from the extension if omitted)")

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _report(issues: List[ValidationIssue]) -> None:
    for issue in issues:
        print(f"{issue.field}: {issue.message} [{issue.kind.value}]")


def _list_types(registry: UploadTypeRegistry) -> int:
    for upload_type in registry.upload_types():
        schema = registry.require(upload_type)
        print(f"{upload_type}\t{', '.join(schema.expected_columns)}")
    return 0


def _write_template(registry: UploadTypeRegistry, args: argparse.Namespace) -> int:
    artifact = emit_template(registry.require(args.upload_type))
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    destination = output_dir / artifact.filename
    destination.write_bytes(artifact.content)
    LOGGER.info("Template written to %s", destination.resolve())
    return 0


def _build_upload(registry: UploadTypeRegistry, args: argparse.Namespace) -> int:
    if args.input == "-":
        raw_text = sys.stdin.read()
        default_name = "manual_input"
    else:
        raw_text = Path(args.input).read_text(encoding="utf-8-sig")
        default_name = suggest_list_name(args.input)

    schema = registry.get(args.upload_type)
    submission = check_submission(MANUAL_MODE, schema, args.name or default_name, raw_text=raw_text)
    outcome = submission.outcome
    if outcome is not None:
        for contact in outcome.invalid:
            LOGGER.warning("Ignoring invalid contact %r", contact.original)
    if not submission.can_submit:
        _report(submission.issues)
        return 1

    artifact = synthesize(outcome.valid, schema)
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    destination = output_dir / artifact.filename
    destination.write_bytes(artifact.content)
    LOGGER.info(
        "Wrote %s contacts (%s) to %s",
        artifact.row_count,
        format_file_size(len(artifact.content)),
        destination.resolve(),
    )
    return 0


def _check_upload(registry: UploadTypeRegistry, args: argparse.Namespace) -> int:
    path = Path(args.file)
    schema = registry.require(args.upload_type)
    selection = FileSelection(name=path.name, size_bytes=path.stat().st_size, content_type=args.content_type)

    issues = check_file(selection, schema)
    if not issues:
        try:
            issues = check_header(read_header(path), schema)
        except UnsupportedFileTypeError as exc:
            issues = [ValidationIssue(ErrorKind.UNSUPPORTED_FORMAT, "file", str(exc))]
    if issues:
        _report(issues)
        return 1

    LOGGER.info("%s (%s) is ready to upload as %s", path.name, format_file_size(selection.size_bytes), schema.upload_type)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    registry = UploadTypeRegistry.from_file(args.config)
    if not registry.upload_types():
        logging.warning("No active upload types are configured")

    commands = {
        "types": lambda: _list_types(registry),
        "template": lambda: _write_template(registry, args),
        "build": lambda: _build_upload(registry, args),
        "check": lambda: _check_upload(registry, args),
    }
    try:
        return commands[args.command]()
    except IngestionError as exc:
        LOGGER.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
