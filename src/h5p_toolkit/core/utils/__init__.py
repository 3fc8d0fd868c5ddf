"""
Utils Package

Serialization and path utilities.
"""

from .paths import join_entry, normalize_relative_path, split_entry
from .serialization import (
    dump_json,
    load_json_entry,
    load_json_file,
    object_list,
    save_json_file,
    string_list,
    typed_member,
)

__all__ = [
    "join_entry",
    "normalize_relative_path",
    "split_entry",
    "dump_json",
    "load_json_entry",
    "load_json_file",
    "save_json_file",
    "object_list",
    "string_list",
    "typed_member",
]
