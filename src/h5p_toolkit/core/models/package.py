"""
Module: package

Purpose:
    The root entities: PackageDefinition (h5p.json) and Package, which
    holds the definition, the opaque content payload, bundled libraries and
    any extra files stored next to content.json.

Key Classes:
    - PackageDefinition: h5p.json contents (immutable)
    - Package: Mutable in-memory package assembled before writing or
      produced by the archive reader

Dependencies:
    - dataclasses (std)
    - .library: Library, LibraryDependency

Used By:
    - archive.writer / archive.reader
    - core.schemas.validator
    - cli
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

from h5p_toolkit.errors import DuplicateLibraryError

from h5p_toolkit.core.utils.serialization import object_list, string_list, typed_member

from .library import Library, LibraryDependency

logger = logging.getLogger(__name__)

_DEFINITION_KEYS = frozenset({
    "title", "language", "mainLibrary", "embedTypes", "license",
    "defaultLanguage", "author", "preloadedDependencies", "editorDependencies",
})


@dataclass(frozen=True, slots=True)
class PackageDefinition:
    """
    h5p.json contents (immutable).

    Attributes:
        title: Package title
        language: Content language code, "und" when undetermined
        main_library: Machine name of the library that runs the content
        embed_types: Supported embed types ("div", "iframe")
        preloaded_dependencies: Libraries (name + major.minor) the content uses
        editor_dependencies: Libraries the editor needs
        extra: Unmodelled h5p.json keys, written back unchanged
    """

    title: str
    main_library: str
    language: str = "und"
    embed_types: Tuple[str, ...] = ("div",)
    license: Optional[str] = None
    default_language: Optional[str] = None
    author: Optional[str] = None
    preloaded_dependencies: Tuple[LibraryDependency, ...] = ()
    editor_dependencies: Tuple[LibraryDependency, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {
            "title": self.title,
            "language": self.language,
            "mainLibrary": self.main_library,
            "embedTypes": list(self.embed_types),
        }
        if self.license:
            d["license"] = self.license
        if self.default_language:
            d["defaultLanguage"] = self.default_language
        if self.author:
            d["author"] = self.author
        d["preloadedDependencies"] = [dep.to_dict() for dep in self.preloaded_dependencies]
        if self.editor_dependencies:
            d["editorDependencies"] = [dep.to_dict() for dep in self.editor_dependencies]
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> PackageDefinition:
        """
        Deserialize from h5p.json.

        Raises:
            ValueError: If data is not a JSON object or a member has the wrong
                JSON type
        """
        if not isinstance(data, dict):
            raise ValueError(f"h5p.json must be a JSON object, got {type(data).__name__}")
        return cls(
            title=typed_member(data, "title", str, ""),
            main_library=typed_member(data, "mainLibrary", str, ""),
            language=typed_member(data, "language", str, "und"),
            embed_types=string_list(data, "embedTypes"),
            license=typed_member(data, "license", str, None),
            default_language=typed_member(data, "defaultLanguage", str, None),
            author=typed_member(data, "author", str, None),
            preloaded_dependencies=tuple(
                LibraryDependency.from_dict(dep) for dep in object_list(data, "preloadedDependencies")
            ),
            editor_dependencies=tuple(
                LibraryDependency.from_dict(dep) for dep in object_list(data, "editorDependencies")
            ),
            extra={k: v for k, v in data.items() if k not in _DEFINITION_KEYS},
        )


@dataclass
class Package:
    """
    In-memory H5P package.

    Built up through the setters below, then handed to the archive writer.
    The archive is the durable form; reading it back yields a fresh Package.

    Attributes:
        definition: h5p.json contents, None until set
        content: content/content.json payload, any JSON value
        libraries: Directory name -> Library, in insertion order
        content_files: Paths under content/ (other than content.json) -> bytes,
            relative to content/

    Example:
        >>> pkg = Package.new()
        >>> pkg.set_content({"question": "2 + 2?"})
        >>> pkg.content["question"]
        '2 + 2?'
    """

    definition: Optional[PackageDefinition] = None
    content: Any = None
    libraries: Dict[str, Library] = field(default_factory=dict)
    content_files: Dict[str, bytes] = field(default_factory=dict)

    @classmethod
    def new(cls) -> Package:
        return cls()

    # ─────────────────────────────────────────────────────────────────────────
    # Mutators
    # ─────────────────────────────────────────────────────────────────────────

    def set_package_definition(self, definition: PackageDefinition) -> None:
        self.definition = definition

    def set_content(self, content: Any) -> None:
        self.content = content

    def add_library(self, library: Library, *, replace: bool = False) -> None:
        """
        Add a library under its directory name.

        Raises:
            DuplicateLibraryError: If the directory is taken and replace is False
        """
        if library.directory in self.libraries and not replace:
            raise DuplicateLibraryError(library.directory)
        if library.directory in self.libraries:
            logger.debug(f"Replacing library {library.directory}")
        self.libraries[library.directory] = library

    def set_package_files(self, files: Dict[str, bytes]) -> None:
        """Replace all content files (paths relative to content/)."""
        self.content_files = {path: bytes(data) for path, data in files.items()}

    def add_content_file(self, path: str, data: bytes) -> None:
        self.content_files[path] = bytes(data)

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def get_library(self, name: str) -> Optional[Library]:
        """Find a library by directory name, falling back to machine name."""
        if name in self.libraries:
            return self.libraries[name]
        for library in self.libraries.values():
            if library.machine_name == name:
                return library
        return None

    @property
    def main_library(self) -> Optional[Library]:
        if self.definition is None or not self.definition.main_library:
            return None
        return self.get_library(self.definition.main_library)

    def iter_libraries(self) -> Iterator[Library]:
        return iter(self.libraries.values())

    def __repr__(self) -> str:
        title = self.definition.title if self.definition else None
        return f"Package(title={title!r}, libraries={list(self.libraries)})"
