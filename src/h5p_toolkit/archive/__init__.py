"""
Archive Package

Reading and writing .h5p archives (ZIP containers with a fixed layout).
"""

from .layout import EntryKind, classify_entry
from .reader import ArchiveReader, extract_package, load_package
from .writer import iter_entries, package_to_bytes, write_package, write_to_stream

__all__ = [
    "ArchiveReader",
    "EntryKind",
    "classify_entry",
    "extract_package",
    "iter_entries",
    "load_package",
    "package_to_bytes",
    "write_package",
    "write_to_stream",
]
