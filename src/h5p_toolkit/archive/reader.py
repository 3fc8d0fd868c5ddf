"""
Module: archive.reader

Purpose:
    Rebuild a Package from an H5P archive. There is no manifest listing the
    libraries: each entry is classified by its path (archive.layout) and
    libraries are inferred from top-level folder names.

Key Functions:
    - load_package(): Read an archive into a Package
    - extract_package(): Unpack an archive to a directory

Key Classes:
    - ArchiveReader: Reader that also reports the entries it skipped

Dependencies:
    - zipfile (std)
    - h5p_toolkit.core.models: Package, Library, definitions
    - h5p_toolkit.core.utils: JSON decoding, path normalization

Used By:
    - cli
    - callers inspecting packages
"""

from __future__ import annotations

import logging
import os
import zipfile
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

from h5p_toolkit.config import ArchiveConfig, DEFAULT_CONFIG
from h5p_toolkit.core.models.library import Library, LibraryDefinition
from h5p_toolkit.core.models.package import Package, PackageDefinition
from h5p_toolkit.core.utils.paths import normalize_relative_path
from h5p_toolkit.core.utils.serialization import load_json_entry
from h5p_toolkit.errors import ArchiveReadError, MalformedEntryError, UnsafePathError

from .layout import EntryKind, classify_entry

logger = logging.getLogger(__name__)

ArchiveSource = Union[str, os.PathLike, bytes, bytearray, BinaryIO]


def _open_archive(source: ArchiveSource) -> zipfile.ZipFile:
    """Open a path, a byte string or a binary stream as a ZIP archive."""
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(bytes(source))
    elif isinstance(source, (str, os.PathLike)):
        source = Path(source)
    try:
        return zipfile.ZipFile(source, "r")
    except (zipfile.BadZipFile, OSError) as e:
        raise ArchiveReadError(f"Cannot open H5P archive: {e}") from e


class ArchiveReader:
    """
    Reads H5P archives into Package objects in a single pass.

    Entries are classified by path, most specific pattern first:
    h5p.json, content/content.json, other content/ files,
    <dir>/library.json, <dir>/semantics.json, then files of library
    folders. A folder counts as a library when its name starts with one of
    ArchiveConfig.library_prefixes, or when it holds a library.json or
    semantics.json. Files of other folders are set aside during the pass and
    dropped at the end unless the folder turned out to be a library; the
    dropped entries are listed in `skipped_entries` and logged.

    Attributes:
        config: Archive options
        skipped_entries: Entry names ignored by the last read()

    Example:
        >>> reader = ArchiveReader()
        >>> package = reader.read("quiz.h5p")  # doctest: +SKIP
        >>> reader.skipped_entries  # doctest: +SKIP
        ['README.txt']
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.skipped_entries: List[str] = []

    def read(self, source: ArchiveSource) -> Package:
        """
        Read an archive.

        Args:
            source: Path, archive bytes or a readable binary stream

        Returns:
            A new Package

        Raises:
            ArchiveReadError: If the container is not a readable ZIP file
            MalformedEntryError: If h5p.json, content.json, a library.json
                or a semantics.json does not hold the expected JSON
            UnsafePathError: If an entry name is absolute or climbs out of
                the archive root
        """
        self.skipped_entries = []
        package = Package.new()
        # Directory -> Library for this read only
        index: Dict[str, Library] = {}
        # Files of folders not (yet) known to be libraries
        pending: Dict[str, Dict[str, bytes]] = {}

        with _open_archive(source) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                name = normalize_relative_path(info.filename)
                data = self._read_entry(zf, info)
                self._dispatch(package, index, pending, name, data)

        for directory, files in pending.items():
            if directory in index:
                index[directory].files.update(files)
                continue
            for path in files:
                self.skipped_entries.append(f"{directory}/{path}")

        for library in index.values():
            package.add_library(library)

        if self.skipped_entries:
            logger.warning(
                f"Ignored {len(self.skipped_entries)} unrecognized archive entries: "
                f"{', '.join(self.skipped_entries[:5])}"
                f"{' ...' if len(self.skipped_entries) > 5 else ''}"
            )
        logger.info(
            f"Loaded H5P package with {len(package.libraries)} libraries "
            f"and {len(package.content_files)} content files"
        )
        return package

    def _read_entry(self, zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> bytes:
        try:
            return zf.read(info)
        except (zipfile.BadZipFile, OSError, RuntimeError, NotImplementedError) as e:
            raise ArchiveReadError(f"Cannot read archive entry {info.filename!r}: {e}") from e

    def _dispatch(
        self,
        package: Package,
        index: Dict[str, Library],
        pending: Dict[str, Dict[str, bytes]],
        name: str,
        data: bytes,
    ) -> None:
        entry = classify_entry(name)
        logger.debug(f"Reading {name} as {entry.kind.value}")

        if entry.kind == EntryKind.PACKAGE_DEFINITION:
            package.definition = _decode(name, data, PackageDefinition.from_dict)

        elif entry.kind == EntryKind.CONTENT:
            package.content = load_json_entry(name, data)

        elif entry.kind == EntryKind.CONTENT_FILE:
            package.content_files[entry.path] = data

        elif entry.kind == EntryKind.LIBRARY_DEFINITION:
            library = _get_or_create(index, entry.directory)
            library.definition = _decode(name, data, LibraryDefinition.from_dict)

        elif entry.kind == EntryKind.SEMANTICS:
            semantics = load_json_entry(name, data)
            if not isinstance(semantics, list):
                raise MalformedEntryError(name, "semantics must be a JSON array")
            _get_or_create(index, entry.directory).semantics = semantics

        elif entry.kind == EntryKind.LIBRARY_FILE:
            if entry.directory in index or self.config.is_library_directory(entry.directory):
                _get_or_create(index, entry.directory).files[entry.path] = data
            else:
                pending.setdefault(entry.directory, {})[entry.path] = data

        else:
            self.skipped_entries.append(name)


def _get_or_create(index: Dict[str, Library], directory: str) -> Library:
    library = index.get(directory)
    if library is None:
        library = Library(directory=directory)
        index[directory] = library
    return library


def _decode(name: str, data: bytes, factory):
    try:
        return factory(load_json_entry(name, data))
    except ValueError as e:
        raise MalformedEntryError(name, str(e)) from e


def load_package(source: ArchiveSource, config: Optional[ArchiveConfig] = None) -> Package:
    """
    Read an H5P archive into a Package.

    Args:
        source: Path, archive bytes or a readable binary stream
        config: Archive options, DEFAULT_CONFIG if None

    Returns:
        The reconstructed Package

    Example:
        >>> package = load_package(Path("quiz.h5p"))  # doctest: +SKIP
        >>> package.definition.title  # doctest: +SKIP
        'Geography Quiz'
    """
    return ArchiveReader(config).read(source)


def extract_package(source: ArchiveSource, destination: Union[str, Path]) -> List[Path]:
    """
    Unpack every file of an archive below a destination directory.

    Entry names are normalized and checked before anything is written, so a
    hostile archive cannot place files outside the destination.

    Returns:
        Paths of the extracted files, in archive order

    Raises:
        ArchiveReadError: If the archive cannot be read
        UnsafePathError: If an entry would land outside the destination
    """
    destination = Path(destination)
    root = destination.resolve()
    written: List[Path] = []

    with _open_archive(source) as zf:
        plan = []
        for info in zf.infolist():
            if info.is_dir():
                continue
            relative = normalize_relative_path(info.filename)
            target = (root / relative).resolve()
            if not target.is_relative_to(root):
                raise UnsafePathError(info.filename, "resolves outside the destination")
            plan.append((info, target))

        for info, target in plan:
            data = ArchiveReader()._read_entry(zf, info)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
            written.append(target)

    logger.info(f"Extracted {len(written)} files to {destination}")
    return written
