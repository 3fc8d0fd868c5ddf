"""
Module: archive.layout

Purpose:
    The fixed path convention of an H5P archive, shared by the writer and
    the reader so both sides agree on where each entity lives.

        package.h5p
        ├── h5p.json                          # PackageDefinition
        ├── content/
        │   ├── content.json                  # content payload
        │   └── images/...                    # content files
        └── H5P.MultiChoice-1.16/             # one folder per library
            ├── library.json                  # LibraryDefinition
            ├── semantics.json                # Field array (optional)
            └── js/multichoice.js ...         # library files

Key Functions:
    - classify_entry(): Map an entry name to an EntryKind
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from h5p_toolkit.core.utils.paths import split_entry

H5P_JSON = "h5p.json"
CONTENT_DIR = "content"
CONTENT_JSON = f"{CONTENT_DIR}/content.json"
LIBRARY_JSON = "library.json"
SEMANTICS_JSON = "semantics.json"

# Names inside a library folder that are written from the model, not from files
RESERVED_LIBRARY_FILES = frozenset({LIBRARY_JSON, SEMANTICS_JSON})


class EntryKind(str, Enum):
    """What an archive entry holds, judged by its path alone."""
    PACKAGE_DEFINITION = "package_definition"
    CONTENT = "content"
    CONTENT_FILE = "content_file"
    LIBRARY_DEFINITION = "library_definition"
    SEMANTICS = "semantics"
    LIBRARY_FILE = "library_file"
    ROOT_FILE = "root_file"


class ClassifiedEntry(NamedTuple):
    kind: EntryKind
    directory: str  # first path segment, "" for root files
    path: str       # remainder below the directory


def classify_entry(name: str) -> ClassifiedEntry:
    """
    Classify an entry by path, most specific pattern first.

    Library definitions and semantics are only recognised directly below a
    top-level folder; a nested "vendor/library.json" is an ordinary file.

    Examples:
        >>> classify_entry("h5p.json").kind
        <EntryKind.PACKAGE_DEFINITION: 'package_definition'>
        >>> classify_entry("H5P.Foo-1.0/semantics.json")
        ClassifiedEntry(kind=<EntryKind.SEMANTICS: 'semantics'>, directory='H5P.Foo-1.0', path='semantics.json')
    """
    if name == H5P_JSON:
        return ClassifiedEntry(EntryKind.PACKAGE_DEFINITION, "", name)
    if name == CONTENT_JSON:
        return ClassifiedEntry(EntryKind.CONTENT, CONTENT_DIR, "content.json")

    directory, path = split_entry(name)
    if not directory:
        return ClassifiedEntry(EntryKind.ROOT_FILE, "", path)
    if directory == CONTENT_DIR:
        return ClassifiedEntry(EntryKind.CONTENT_FILE, directory, path)
    if path == LIBRARY_JSON:
        return ClassifiedEntry(EntryKind.LIBRARY_DEFINITION, directory, path)
    if path == SEMANTICS_JSON:
        return ClassifiedEntry(EntryKind.SEMANTICS, directory, path)
    return ClassifiedEntry(EntryKind.LIBRARY_FILE, directory, path)
