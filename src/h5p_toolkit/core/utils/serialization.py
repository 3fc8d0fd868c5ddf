"""
Serialization Utilities

JSON encoding and decoding for archive entries.

- `dump_json()` produces the UTF-8, 2-space indented form every JSON entry
  is written in, so archives diff cleanly.
- `load_json_entry()` decodes an entry and turns any decoding problem into
  MalformedEntryError naming the entry.
- `load_json_file()` / `save_json_file()` do the same for loose files on disk.
- `typed_member()`, `object_list()` and `string_list()` read members of a
  decoded object and raise ValueError when a member has the wrong JSON type.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Tuple

from h5p_toolkit.errors import MalformedEntryError


def dump_json(data: Any, *, indent: int = 2) -> bytes:
    """
    Encode data as pretty-printed UTF-8 JSON.

    Args:
        data: Any JSON-serializable value
        indent: Spaces per indentation level

    Returns:
        Encoded bytes (no trailing newline)

    Raises:
        TypeError: If data contains values JSON cannot represent
    """
    return json.dumps(data, indent=indent, ensure_ascii=False).encode("utf-8")


def load_json_entry(entry: str, data: bytes) -> Any:
    """
    Decode the JSON held by an archive entry.

    A UTF-8 byte order mark is tolerated since some editors add one.

    Raises:
        MalformedEntryError: If data is not UTF-8 or not valid JSON
    """
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise MalformedEntryError(entry, f"not UTF-8 ({e.reason} at byte {e.start})") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedEntryError(entry, f"{e.msg} (line {e.lineno}, column {e.colno})") from e


def load_json_file(path: Path) -> Any:
    """Load a JSON file from disk; errors name the file path."""
    return load_json_entry(str(path), path.read_bytes())


def save_json_file(path: Path, data: Any, *, indent: int = 2) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dump_json(data, indent=indent))


# ─────────────────────────────────────────────────────────────────────────────
# Typed access to decoded JSON objects
# ─────────────────────────────────────────────────────────────────────────────

_TYPE_NAMES = {int: "an integer", str: "a string", bool: "a boolean"}


def typed_member(data: dict, key: str, expected: type, default: Any) -> Any:
    """
    Return data[key] after checking its JSON type.

    Absent and null members give `default`. Booleans are not accepted as
    integers.

    Raises:
        ValueError: If the member has another type
    """
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ValueError(f"{key!r} must be {_TYPE_NAMES[expected]}, got {type(value).__name__}")
    return value


def object_list(data: dict, key: str) -> List[dict]:
    """Return the list of JSON objects under key ([] when absent)."""
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise ValueError(f"{key!r} must be a list of objects")
    return items


def string_list(data: dict, key: str) -> Tuple[str, ...]:
    """Return the strings listed under key (() when absent)."""
    items = data.get(key)
    if items is None:
        return ()
    if not isinstance(items, list) or not all(isinstance(item, str) for item in items):
        raise ValueError(f"{key!r} must be a list of strings")
    return tuple(items)
