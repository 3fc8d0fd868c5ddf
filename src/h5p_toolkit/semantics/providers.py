"""
Module: semantics.providers

Purpose:
    Where semantics.json bytes come from. Library construction takes a
    SemanticsProvider argument, so nothing in the core depends on which
    content types happen to ship with the toolkit.

Key Classes:
    - SemanticsProvider: Interface (semantics_for / available)
    - BundledSemantics: MultiChoice, TrueFalse and Essay semantics shipped
      as package data
    - DirectorySemantics: Semantics read from a directory tree on disk

Key Functions:
    - build_library(): Assemble a Library from a definition and a provider

Dependencies:
    - pathlib (std)
    - h5p_toolkit.core.models.library

Used By:
    - callers assembling packages
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from h5p_toolkit.core.models.library import Library, LibraryDefinition
from h5p_toolkit.errors import MalformedEntryError

logger = logging.getLogger(__name__)

SEMANTICS_FILE = "semantics.json"
DATA_DIR = Path(__file__).resolve().parent / "data"

# Machine name -> bundled data file
BUNDLED_FILES: Dict[str, str] = {
    "H5P.MultiChoice": "multichoice.json",
    "H5P.TrueFalse": "truefalse.json",
    "H5P.Essay": "essay.json",
}


class SemanticsProvider(ABC):
    """Supplies semantics.json bytes for library definitions."""

    @abstractmethod
    def semantics_for(self, definition: LibraryDefinition) -> Optional[bytes]:
        """Return semantics.json bytes for a library, or None if unknown."""

    @abstractmethod
    def available(self) -> Tuple[str, ...]:
        """Machine names (or directory names) this provider can serve."""


class BundledSemantics(SemanticsProvider):
    """
    Semantics shipped inside the h5p_toolkit.semantics package.

    Lookup is by machine name only; the bundled files are not versioned.

    Args:
        aliases: Extra machine name -> bundled machine name entries, e.g.
            {"Quiz.MultiChoice": "H5P.MultiChoice"}

    Example:
        >>> provider = BundledSemantics()
        >>> provider.available()
        ('H5P.Essay', 'H5P.MultiChoice', 'H5P.TrueFalse')
    """

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        self.aliases = dict(aliases or {})
        for alias, target in self.aliases.items():
            if target not in BUNDLED_FILES:
                raise ValueError(f"Alias {alias!r} points at unknown bundled library {target!r}")

    def available(self) -> Tuple[str, ...]:
        return tuple(sorted(set(BUNDLED_FILES) | set(self.aliases)))

    def semantics_for(self, definition: LibraryDefinition) -> Optional[bytes]:
        name = self.aliases.get(definition.machine_name, definition.machine_name)
        filename = BUNDLED_FILES.get(name)
        if filename is None:
            return None
        return (DATA_DIR / filename).read_bytes()


class DirectorySemantics(SemanticsProvider):
    """
    Semantics from a directory of unpacked libraries.

    For a definition, `<root>/<machineName>-<major>.<minor>/semantics.json`
    is tried first, then `<root>/<machineName>/semantics.json`.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        if not self.root.is_dir():
            raise ValueError(f"Semantics directory does not exist: {self.root}")

    def available(self) -> Tuple[str, ...]:
        return tuple(sorted(
            path.parent.name for path in self.root.glob(f"*/{SEMANTICS_FILE}")
        ))

    def semantics_for(self, definition: LibraryDefinition) -> Optional[bytes]:
        for directory in (definition.directory, definition.machine_name):
            path = self.root / directory / SEMANTICS_FILE
            if path.is_file():
                logger.debug(f"Using semantics from {path}")
                return path.read_bytes()
        return None


def build_library(
    definition: LibraryDefinition,
    provider: Optional[SemanticsProvider] = None,
    files: Optional[Dict[str, bytes]] = None,
) -> Library:
    """
    Create a Library for a definition, with semantics from a provider.

    Args:
        definition: The library.json contents
        provider: Semantics source; None builds a library without semantics
        files: Asset files (relative path -> bytes)

    Returns:
        Library in the conventional <machineName>-<major>.<minor> directory

    Raises:
        MalformedEntryError: If the provider returns bytes that are not a
            JSON array

    Example:
        >>> definition = LibraryDefinition("Multiple Choice", "H5P.MultiChoice", 1, 16)
        >>> library = build_library(definition, BundledSemantics())
        >>> library.directory
        'H5P.MultiChoice-1.16'
    """
    semantics = provider.semantics_for(definition) if provider is not None else None
    if provider is not None and semantics is None:
        logger.warning(f"No semantics available for {definition.machine_name}")
    try:
        return Library.from_semantics_bytes(definition, semantics, files)
    except ValueError as e:
        raise MalformedEntryError(f"{definition.directory}/{SEMANTICS_FILE}", str(e)) from e
