"""
Module: archive.writer

Purpose:
    Serialize a Package into an H5P archive. Every logical unit maps to one
    ZIP entry at its conventional path (see archive.layout).

Key Functions:
    - write_package(): Write an archive file atomically
    - package_to_bytes(): Produce the archive in memory
    - iter_entries(): The (entry name, bytes) sequence both of them write

Dependencies:
    - zipfile (std)
    - h5p_toolkit.core.models: Package
    - h5p_toolkit.core.utils: JSON encoding, path normalization

Used By:
    - cli
    - callers assembling packages
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
import zipfile
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Iterator, Optional, Tuple, Union

from h5p_toolkit.config import ArchiveConfig, DEFAULT_CONFIG
from h5p_toolkit.core.models.package import Package
from h5p_toolkit.core.utils.paths import join_entry, normalize_relative_path
from h5p_toolkit.core.utils.serialization import dump_json
from h5p_toolkit.errors import ArchiveWriteError

from .layout import CONTENT_DIR, CONTENT_JSON, H5P_JSON, LIBRARY_JSON, RESERVED_LIBRARY_FILES, SEMANTICS_JSON

logger = logging.getLogger(__name__)

# rw-r--r-- regular file
_FILE_ATTRIBUTES = 0o100644 << 16


def write_package(
    package: Package,
    output_path: Union[str, Path],
    config: Optional[ArchiveConfig] = None,
) -> Path:
    """
    Write a package to an .h5p archive file.

    The archive is assembled in memory, written to a temporary file in the
    destination directory and moved into place with os.replace(), so the
    destination is either the complete new archive or untouched.

    Args:
        package: Package to serialize
        output_path: Destination (".h5p" is appended if it has no suffix)
        config: Archive options, DEFAULT_CONFIG if None

    Returns:
        Path to the written archive

    Raises:
        ArchiveWriteError: If an entry cannot be encoded or the file cannot be written
        UnsafePathError: If a file path is absolute or escapes its directory
    """
    output_path = Path(output_path)
    if not output_path.suffix:
        output_path = output_path.with_suffix(".h5p")

    data = package_to_bytes(package, config)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{output_path.name}.", suffix=".tmp", dir=output_path.parent
        )
    except OSError as e:
        raise ArchiveWriteError(f"Cannot create archive at {output_path}: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, output_path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise ArchiveWriteError(f"Cannot write archive to {output_path}: {e}") from e

    logger.info(f"Created H5P archive at {output_path} ({len(data)} bytes)")
    return output_path


def package_to_bytes(package: Package, config: Optional[ArchiveConfig] = None) -> bytes:
    """Serialize a package into archive bytes."""
    buffer = BytesIO()
    write_to_stream(package, buffer, config)
    return buffer.getvalue()


def write_to_stream(
    package: Package,
    stream: BinaryIO,
    config: Optional[ArchiveConfig] = None,
) -> int:
    """
    Write a package as a ZIP archive to a binary stream.

    Returns:
        Number of entries written

    Raises:
        ArchiveWriteError: If any entry fails; the stream content is then
            incomplete and must be discarded
    """
    config = config or DEFAULT_CONFIG
    count = 0
    try:
        with zipfile.ZipFile(
            stream, "w", compression=config.compression, compresslevel=config.compress_level
        ) as zf:
            for name, data in iter_entries(package, config):
                _write_entry(zf, name, data, config)
                count += 1
    except (OSError, zipfile.LargeZipFile) as e:
        raise ArchiveWriteError(f"Failed to write archive: {e}") from e
    return count


def iter_entries(package: Package, config: Optional[ArchiveConfig] = None) -> Iterator[Tuple[str, bytes]]:
    """
    Yield (entry name, bytes) in write order.

    Order: h5p.json, content/content.json, content files, then per library
    (in insertion order) library.json, semantics.json and its files.

    Raises:
        ArchiveWriteError: On unencodable JSON, a name collision, a duplicate
            entry or a library stored under content/
        UnsafePathError: On a path that is absolute or escapes its directory
    """
    config = config or DEFAULT_CONFIG
    seen: set[str] = set()

    def emit(name: str, data: bytes) -> Tuple[str, bytes]:
        if name in seen:
            raise ArchiveWriteError(f"Duplicate archive entry {name!r}", entry=name)
        seen.add(name)
        logger.debug(f"Writing {name} ({len(data)} bytes)")
        return name, data

    if package.definition is not None:
        yield emit(H5P_JSON, _encode(H5P_JSON, package.definition.to_dict(), config))

    if package.content is not None:
        yield emit(CONTENT_JSON, _encode(CONTENT_JSON, package.content, config))

    for path in _ordered(package.content_files, config):
        name = join_entry(CONTENT_DIR, path)
        if name == CONTENT_JSON:
            raise ArchiveWriteError("Content files cannot replace content.json", entry=name)
        yield emit(name, package.content_files[path])

    for library in package.libraries.values():
        directory = library.directory
        if directory == CONTENT_DIR:
            raise ArchiveWriteError(
                f"Library directory {directory!r} is reserved for content files", entry=directory
            )

        if library.definition is not None:
            name = join_entry(directory, LIBRARY_JSON)
            yield emit(name, _encode(name, library.definition.to_dict(), config))

        if library.semantics is not None:
            name = join_entry(directory, SEMANTICS_JSON)
            yield emit(name, _encode(name, library.semantics, config))

        for path in _ordered(library.files, config):
            if normalize_relative_path(path) in RESERVED_LIBRARY_FILES:
                raise ArchiveWriteError(
                    f"Library file {path!r} collides with a generated entry", entry=path
                )
            yield emit(join_entry(directory, path), library.files[path])


def _ordered(files: Dict[str, bytes], config: ArchiveConfig) -> Iterable[str]:
    return sorted(files) if config.sort_files else list(files)


def _encode(entry: str, data: object, config: ArchiveConfig) -> bytes:
    try:
        return dump_json(data, indent=config.json_indent)
    except (TypeError, ValueError) as e:
        raise ArchiveWriteError(f"Cannot encode {entry} as JSON: {e}", entry=entry) from e


def _write_entry(zf: zipfile.ZipFile, name: str, data: bytes, config: ArchiveConfig) -> None:
    """Write a single entry with a fixed timestamp and permissions."""
    timestamp = config.fixed_timestamp or time.localtime()[:6]
    info = zipfile.ZipInfo(name, date_time=timestamp)
    info.compress_type = config.compression
    info.external_attr = _FILE_ATTRIBUTES
    try:
        zf.writestr(info, data, compresslevel=config.compress_level)
    except (OSError, ValueError) as e:
        raise ArchiveWriteError(f"Failed to write entry {name!r}: {e}", entry=name) from e
