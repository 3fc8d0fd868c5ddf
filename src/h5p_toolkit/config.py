"""
Module: config

Purpose:
    Configuration dataclass for archive reading and writing. Immutable
    configuration with validation on construction.

Key Classes:
    - ArchiveConfig: Options shared by ArchiveReader and the writer

Dependencies:
    - dataclasses (std)
    - zipfile (std)

Used By:
    - archive.writer: Entry order, compression, timestamps
    - archive.reader: Library directory recognition
"""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from typing import Optional, Tuple

# Earliest timestamp a ZIP entry can carry
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

_COMPRESSIONS = (zipfile.ZIP_STORED, zipfile.ZIP_DEFLATED)


@dataclass(frozen=True)
class ArchiveConfig:
    """
    Configuration for archive I/O (immutable).

    Attributes:
        library_prefixes: Top-level folder prefixes recognised as library
            directories even before their library.json has been seen
        sort_files: Write library and content files in lexicographic path
            order instead of insertion order
        compression: zipfile.ZIP_DEFLATED or zipfile.ZIP_STORED
        compress_level: Deflate level (0-9), None for the zlib default
        json_indent: Indentation used for every JSON entry
        fixed_timestamp: Timestamp stamped on every entry, None for now()

    Example:
        >>> config = ArchiveConfig(library_prefixes=("H5P.", "Quiz."))
        >>> config.is_library_directory("Quiz.MultiChoice-1.16")
        True
    """

    library_prefixes: Tuple[str, ...] = ("H5P.",)
    sort_files: bool = True
    compression: int = zipfile.ZIP_DEFLATED
    compress_level: Optional[int] = None
    json_indent: int = 2
    fixed_timestamp: Optional[Tuple[int, int, int, int, int, int]] = ZIP_EPOCH

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if isinstance(self.library_prefixes, str):
            raise ValueError("library_prefixes must be a sequence of strings, not a string")
        if any(not prefix for prefix in self.library_prefixes):
            raise ValueError("library_prefixes cannot contain empty prefixes")
        if self.compression not in _COMPRESSIONS:
            raise ValueError(f"Unsupported compression: {self.compression}")
        if self.compress_level is not None and not 0 <= self.compress_level <= 9:
            raise ValueError(f"compress_level must be 0-9: {self.compress_level}")
        if self.json_indent < 0:
            raise ValueError(f"json_indent must be non-negative: {self.json_indent}")
        if self.fixed_timestamp is not None and tuple(self.fixed_timestamp) < ZIP_EPOCH:
            raise ValueError(f"fixed_timestamp predates the ZIP epoch: {self.fixed_timestamp}")

    def is_library_directory(self, name: str) -> bool:
        """Whether a top-level folder name follows the library naming convention."""
        return any(name.startswith(prefix) for prefix in self.library_prefixes)


DEFAULT_CONFIG = ArchiveConfig()
