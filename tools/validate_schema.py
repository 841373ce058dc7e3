#!/usr/bin/env python3
"""
Spotter Export Checker

Checks analysis exports (the JSON files written by
`spotter analyze --report-dir`) in two passes:

    1. Shape: Draft-07 validation against schemas/analysis.schema.json
    2. Content: rules the schema cannot express
        - every event has startTime < endTime
        - event ids are unique within a result
        - synthetic events carry confidence >= FILLER_CONFIDENCE_MIN
        - isDanger is set exactly when a precautionary message is present

Content rules only run on documents whose shape is valid.

Usage:
    python tools/validate_schema.py <path> [<path> ...]

A path may be a single export or a report directory; directories are
scanned for analysis_*.json.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Iterator

import jsonschema

from spotter.curation import FILLER_CONFIDENCE_MIN
from spotter.events import SYNTHETIC_ID_PREFIX


SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

SCHEMA_FILES = {
    "analysis": "analysis.schema.json",
}

EXPORT_GLOB = "analysis_*.json"


def load_schema(schema_name: str = "analysis") -> dict:
    if schema_name not in SCHEMA_FILES:
        raise ValueError(f"Unknown schema: {schema_name}. Valid: {list(SCHEMA_FILES.keys())}")
    with open(SCHEMA_DIR / SCHEMA_FILES[schema_name], "r") as f:
        return json.load(f)


def shape_errors(document: dict, schema: dict) -> list[str]:
    """Schema violations as 'path: message' strings."""
    validator = jsonschema.Draft7Validator(schema)
    ordered = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])
    return [
        f"{'.'.join(str(p) for p in error.absolute_path) or '(root)'}: {error.message}"
        for error in ordered
    ]


def content_errors(document: dict) -> list[str]:
    """Cross-field rule violations of a shape-valid export."""
    errors = []
    seen_ids = set()
    for i, event in enumerate(document["events"]):
        where = f"events.{i}"
        if event["startTime"] >= event["endTime"]:
            errors.append(
                f"{where}: startTime {event['startTime']} is not before endTime {event['endTime']}"
            )
        if event["id"] in seen_ids:
            errors.append(f"{where}.id: duplicate event id '{event['id']}'")
        seen_ids.add(event["id"])
        if event["id"].startswith(SYNTHETIC_ID_PREFIX) and event["confidence"] < FILLER_CONFIDENCE_MIN:
            errors.append(
                f"{where}.confidence: synthetic event below {FILLER_CONFIDENCE_MIN}"
            )

    has_message = bool(document["precautionaryMessage"].strip())
    if document["isDanger"] and not has_message:
        errors.append("precautionaryMessage: empty for a danger result")
    elif not document["isDanger"] and has_message:
        errors.append("precautionaryMessage: set on a result without danger")
    return errors


def validate_document(document: dict, schema: dict | None = None) -> list[str]:
    """
    Check one analysis export.

    Returns:
        List of error messages (empty if valid).
    """
    errors = shape_errors(document, schema if schema is not None else load_schema())
    if errors:
        return errors
    return content_errors(document)


def iter_exports(paths: list[Path]) -> Iterator[Path]:
    """Expand report directories into their export files."""
    for path in paths:
        if path.is_dir():
            yield from sorted(path.glob(EXPORT_GLOB))
        else:
            yield path


def main() -> None:
    parser = argparse.ArgumentParser(description="Check Spotter analysis exports")
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Export files or report directories",
    )
    args = parser.parse_args()

    schema = load_schema()
    exports = list(iter_exports(args.paths))
    if not exports:
        sys.exit("Error: No analysis exports found")

    failed = 0
    for path in exports:
        try:
            with open(path, "r") as f:
                document = json.load(f)
        except FileNotFoundError:
            sys.exit(f"Error: File not found: {path}")
        except json.JSONDecodeError as e:
            sys.exit(f"Error: Invalid JSON in {path}: {e}")

        errors = validate_document(document, schema)
        if errors:
            failed += 1
            print(f"INVALID {path}: {len(errors)} error(s) found:")
            for error in errors:
                print(f"  - {error}")
        else:
            print(f"VALID {path}")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
