"""Turns command-line arguments and files into gateway requests."""

import json
from pathlib import Path
from typing import Any

COLUMN_SPEC_FORMAT = "name:type[:length][:pk][:notnull]"


def parse_column_spec(spec: str) -> dict[str, Any]:
    """Parse a ``--column`` value into a ColumnDefinition payload.

    Examples:
        "id:integer:pk:notnull" → id, integer, primary key, NOT NULL
        "email:varchar:255" → email, varchar(255), nullable

    Raises:
        ValueError: If the name or type is missing, or a modifier is unknown
    """
    name, _, rest = spec.partition(":")
    type_token, *modifiers = rest.split(":") if rest else [""]
    if not name or not type_token:
        raise ValueError(f"Invalid column spec: '{spec}'. Expected format: {COLUMN_SPEC_FORMAT}")

    column: dict[str, Any] = {"name": name, "type": type_token}
    flags = {"pk": ("primary_key", True), "notnull": ("nullable", False)}
    for modifier in modifiers:
        if modifier.isdigit():
            column["length"] = int(modifier)
        elif modifier in flags:
            key, value = flags[modifier]
            column[key] = value
        else:
            raise ValueError(f"Invalid modifier: '{modifier}'. Supported: <length>, pk, notnull")

    column.setdefault("primary_key", False)
    column.setdefault("nullable", True)
    return column


def _existing(path: str) -> Path:
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return file_path


def read_text(path: str) -> str:
    """Read a .sql (or any text) file."""
    return _existing(path).read_text()


def read_json_file(path: str) -> Any:
    """Read one JSON document, e.g. a table definition."""
    return json.loads(_existing(path).read_text())


def read_records(path: str) -> list[dict[str, Any]]:
    """Read insert rows from a file.

    ``.jsonl`` files hold one object per line (blank lines skipped); any other
    file holds a single object or an array of objects.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On invalid JSON (with its line number for JSONL) or a
            document that is not an object or array
    """
    file_path = _existing(path)

    if file_path.suffix == ".jsonl":
        records = []
        for line_number, line in enumerate(file_path.read_text().splitlines(), start=1):
            if not line.strip():
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_number} of {path}: {e.msg}") from e
        return records

    data = json.loads(file_path.read_text())
    if isinstance(data, dict):
        return [data]
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON object or array of objects in {path}")
    return data
