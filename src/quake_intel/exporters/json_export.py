"""JSON exporter for operation results."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


def _isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def _convert(value: Any) -> Any:
    if isinstance(value, datetime):
        return _isoformat(value)
    if isinstance(value, dict):
        return {str(k): _convert(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_convert(v) for v in value]
    return value


def to_jsonable(result: Any) -> Any:
    """Turn a result dataclass (or nesting of them) into plain JSON types.

    Datetimes become ISO-8601 UTC strings with millisecond precision and a
    trailing ``Z``.
    """
    if is_dataclass(result) and not isinstance(result, type):
        result = asdict(result)
    return _convert(result)


def export_json(
    result: Any,
    output_path: Path,
    indent: int = 2,
) -> Path:
    """Write an operation result to a JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(to_jsonable(result), f, indent=indent, ensure_ascii=False)
    return output_path
