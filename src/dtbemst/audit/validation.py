"""Schema validation of run manifests and audit event logs."""

import json
from functools import cache
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

__all__ = [
    "load_schema",
    "validate_event",
    "validate_manifest",
    "validate_run_outputs",
]

MANIFEST_SCHEMA = "run_manifest.schema.json"
EVENT_SCHEMA = "log_event.schema.json"


@cache
def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by file name."""
    with resources.files("dtbemst.schemas").joinpath(name).open("r", encoding="utf-8") as f:
        return json.load(f)


def validate_manifest(manifest: dict[str, Any]) -> None:
    """Validate a run manifest.

    Raises
    ------
    jsonschema.ValidationError
        If the manifest does not match the schema.
    """
    jsonschema.validate(instance=manifest, schema=load_schema(MANIFEST_SCHEMA))


def validate_event(event: dict[str, Any]) -> None:
    """Validate a single audit event.

    Raises
    ------
    jsonschema.ValidationError
        If the event does not match the schema.
    """
    jsonschema.validate(instance=event, schema=load_schema(EVENT_SCHEMA))


def validate_run_outputs(output_dir: Path) -> int:
    """Validate ``run.json`` and every line of ``events.jsonl`` in *output_dir*.

    Returns
    -------
    int
        Number of events validated.

    Raises
    ------
    FileNotFoundError
        If either file is missing.
    jsonschema.ValidationError
        On the first document that does not match its schema.
    """
    manifest_path = output_dir / "run.json"
    events_path = output_dir / "events.jsonl"

    for path in (manifest_path, events_path):
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

    with manifest_path.open("r", encoding="utf-8") as f:
        validate_manifest(json.load(f))

    count = 0
    with events_path.open("r", encoding="utf-8") as f:
        for line in f:
            if line.strip():
                validate_event(json.loads(line))
                count += 1
    return count
