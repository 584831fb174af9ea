"""Input parsing utilities for CLI commands."""

import json
from pathlib import Path
from typing import Any


def parse_json_object(raw: str) -> dict[str, Any]:
    """Parse an inline JSON payload that must be an object.

    Raises:
        ValueError: If the payload is not valid JSON or not an object
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON payload: {e.msg}") from e
    if not isinstance(data, dict):
        raise ValueError("Person payload must be a JSON object")
    return data


def read_json_file(path: str) -> dict[str, Any]:
    """Read single JSON object from file.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON object

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file does not hold a JSON object
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    return parse_json_object(file_path.read_text())


def read_jsonl_file(path: str) -> list[dict[str, Any]]:
    """Read JSON Lines (JSONL) file.

    Each line should contain a separate JSON object.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If any line is not a JSON object
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    records = []
    with file_path.open("r") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(parse_json_object(line))
            except ValueError as e:
                raise ValueError(f"Line {line_num}: {e}") from e

    return records
