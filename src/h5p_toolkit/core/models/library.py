"""
Module: library

Purpose:
    Library-side entities: dependency references, library.json definitions
    and the Library container that bundles a definition, its semantics and
    its asset files under one archive directory.

Key Classes:
    - LibraryDependency: machineName + major/minor reference
    - FileReference: {"path": ...} entry of preloadedJs/preloadedCss
    - LibraryDefinition: library.json contents (immutable)
    - Library: Mutable container owned by a Package

Dependencies:
    - dataclasses (std)
    - .fields: Field codec for semantics

Used By:
    - core.models.package.Package
    - archive.writer / archive.reader
    - semantics.build_library
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from h5p_toolkit.core.utils.serialization import object_list, typed_member

from .fields import Field, dump_semantics, parse_semantics

_DEPENDENCY_PATTERN = re.compile(r"^\s*(?P<name>\S+)\s+(?P<major>\d+)\.(?P<minor>\d+)\s*$")


@dataclass(frozen=True, slots=True)
class LibraryDependency:
    """
    Reference to another library by machine name and major.minor version.

    Patch versions are not part of a dependency reference.

    Example:
        >>> dep = LibraryDependency.parse("H5P.MultiChoice 1.16")
        >>> dep.machine_name, dep.major_version, dep.minor_version
        ('H5P.MultiChoice', 1, 16)
        >>> str(dep)
        'H5P.MultiChoice 1.16'
    """

    machine_name: str
    major_version: int
    minor_version: int

    @classmethod
    def parse(cls, text: str) -> LibraryDependency:
        """
        Parse the "<machineName> <major>.<minor>" form used in content params.

        Raises:
            ValueError: If text does not follow that form
        """
        match = _DEPENDENCY_PATTERN.match(text) if isinstance(text, str) else None
        if not match:
            raise ValueError(f"Invalid library reference: {text!r}")
        return cls(
            machine_name=match.group("name"),
            major_version=int(match.group("major")),
            minor_version=int(match.group("minor")),
        )

    @property
    def directory(self) -> str:
        """Conventional archive directory for this dependency."""
        return f"{self.machine_name}-{self.major_version}.{self.minor_version}"

    def to_dict(self) -> dict:
        return {
            "machineName": self.machine_name,
            "majorVersion": self.major_version,
            "minorVersion": self.minor_version,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LibraryDependency:
        """
        Raises:
            ValueError: If data is not an object or a member has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Dependency must be a JSON object, got {type(data).__name__}")
        return cls(
            machine_name=typed_member(data, "machineName", str, ""),
            major_version=typed_member(data, "majorVersion", int, 0),
            minor_version=typed_member(data, "minorVersion", int, 0),
        )

    def __str__(self) -> str:
        return f"{self.machine_name} {self.major_version}.{self.minor_version}"


@dataclass(frozen=True, slots=True)
class FileReference:
    """A file a library preloads, relative to the library directory."""

    path: str

    def to_dict(self) -> dict:
        return {"path": self.path}

    @classmethod
    def from_dict(cls, data: dict) -> FileReference:
        return cls(path=typed_member(data, "path", str, ""))


def _dependencies(data: dict, key: str) -> Tuple[LibraryDependency, ...]:
    return tuple(LibraryDependency.from_dict(item) for item in object_list(data, key))


def _references(data: dict, key: str) -> Tuple[FileReference, ...]:
    return tuple(FileReference.from_dict(item) for item in object_list(data, key))


def _runnable(data: dict) -> bool:
    # library.json writes 0/1 as often as false/true
    value = data.get("runnable", False)
    if isinstance(value, (bool, int)) and value in (0, 1):
        return bool(value)
    raise ValueError(f"'runnable' must be a boolean or 0/1, got {value!r}")


_DEFINITION_KEYS = frozenset({
    "title", "machineName", "majorVersion", "minorVersion", "patchVersion",
    "runnable", "author", "license", "description", "preloadedJs",
    "preloadedCss", "dropLibraryCss", "preloadedDependencies", "editorDependencies",
})


@dataclass(frozen=True, slots=True)
class LibraryDefinition:
    """
    library.json contents (immutable).

    Versions are three separate integers; `version` returns them as a tuple
    so definitions order lexicographically on (major, minor, patch).

    Attributes:
        title: Human-readable name
        machine_name: Identifier like "H5P.MultiChoice"
        major_version / minor_version / patch_version: Version triple
        runnable: Whether the library can be a package's main library
        preloaded_js / preloaded_css: Scripts and styles loaded with it
        drop_library_css: Machine names of libraries whose CSS it suppresses
        preloaded_dependencies: Libraries it needs at runtime
        editor_dependencies: Libraries its editor needs
        extra: Unmodelled library.json keys, written back unchanged
    """

    title: str
    machine_name: str
    major_version: int
    minor_version: int
    patch_version: int = 0
    runnable: bool = False
    author: Optional[str] = None
    license: Optional[str] = None
    description: Optional[str] = None
    preloaded_js: Tuple[FileReference, ...] = ()
    preloaded_css: Tuple[FileReference, ...] = ()
    drop_library_css: Tuple[str, ...] = ()
    preloaded_dependencies: Tuple[LibraryDependency, ...] = ()
    editor_dependencies: Tuple[LibraryDependency, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def version(self) -> Tuple[int, int, int]:
        return (self.major_version, self.minor_version, self.patch_version)

    @property
    def version_string(self) -> str:
        return "{}.{}.{}".format(*self.version)

    @property
    def directory(self) -> str:
        """Conventional archive directory: <machineName>-<major>.<minor>."""
        return f"{self.machine_name}-{self.major_version}.{self.minor_version}"

    def as_dependency(self) -> LibraryDependency:
        return LibraryDependency(self.machine_name, self.major_version, self.minor_version)

    def to_dict(self) -> dict:
        d: Dict[str, Any] = {
            "title": self.title,
            "machineName": self.machine_name,
            "majorVersion": self.major_version,
            "minorVersion": self.minor_version,
            "patchVersion": self.patch_version,
            "runnable": self.runnable,
        }
        if self.author:
            d["author"] = self.author
        if self.license:
            d["license"] = self.license
        if self.description:
            d["description"] = self.description
        if self.preloaded_js:
            d["preloadedJs"] = [ref.to_dict() for ref in self.preloaded_js]
        if self.preloaded_css:
            d["preloadedCss"] = [ref.to_dict() for ref in self.preloaded_css]
        if self.drop_library_css:
            d["dropLibraryCss"] = [{"machineName": name} for name in self.drop_library_css]
        if self.preloaded_dependencies:
            d["preloadedDependencies"] = [dep.to_dict() for dep in self.preloaded_dependencies]
        if self.editor_dependencies:
            d["editorDependencies"] = [dep.to_dict() for dep in self.editor_dependencies]
        d.update(self.extra)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> LibraryDefinition:
        """
        Deserialize from library.json.

        Raises:
            ValueError: If data is not a JSON object or a member has the wrong
                JSON type
        """
        if not isinstance(data, dict):
            raise ValueError(f"library.json must be a JSON object, got {type(data).__name__}")
        return cls(
            title=typed_member(data, "title", str, ""),
            machine_name=typed_member(data, "machineName", str, ""),
            major_version=typed_member(data, "majorVersion", int, 0),
            minor_version=typed_member(data, "minorVersion", int, 0),
            patch_version=typed_member(data, "patchVersion", int, 0),
            runnable=_runnable(data),
            author=typed_member(data, "author", str, None),
            license=typed_member(data, "license", str, None),
            description=typed_member(data, "description", str, None),
            preloaded_js=_references(data, "preloadedJs"),
            preloaded_css=_references(data, "preloadedCss"),
            drop_library_css=tuple(
                typed_member(item, "machineName", str, "") for item in object_list(data, "dropLibraryCss")
            ),
            preloaded_dependencies=_dependencies(data, "preloadedDependencies"),
            editor_dependencies=_dependencies(data, "editorDependencies"),
            extra={k: v for k, v in data.items() if k not in _DEFINITION_KEYS},
        )


@dataclass
class Library:
    """
    A library as bundled inside a package.

    Unlike the value types above, Library is mutable: it is assembled piece
    by piece, both by callers and by the archive reader, which may meet a
    library's files before its library.json.

    Attributes:
        directory: Archive folder name. Defaults to the definition's
            <machineName>-<major>.<minor> when left empty.
        definition: Parsed library.json, None until known
        semantics: Raw semantics.json array, None when the library has none
        files: Relative path -> bytes for every other file in the folder
    """

    directory: str = ""
    definition: Optional[LibraryDefinition] = None
    semantics: Optional[List[Any]] = None
    files: Dict[str, bytes] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.directory:
            if self.definition is None:
                raise ValueError("Library needs a directory or a definition")
            self.directory = self.definition.directory

    @property
    def machine_name(self) -> str:
        if self.definition is not None and self.definition.machine_name:
            return self.definition.machine_name
        return self.directory.split("-", 1)[0]

    @property
    def fields(self) -> Tuple[Field, ...]:
        """Semantics decoded through the Field codec (() when absent)."""
        if self.semantics is None:
            return ()
        return parse_semantics(self.semantics)

    def set_fields(self, fields: Sequence[Field]) -> None:
        self.semantics = dump_semantics(fields)

    def set_semantics_bytes(self, data: bytes) -> None:
        """
        Use raw semantics.json bytes, e.g. as supplied by a SemanticsProvider.

        Raises:
            ValueError: If data is not a JSON array
        """
        parsed = json.loads(data.decode("utf-8"))
        if not isinstance(parsed, list):
            raise ValueError("semantics.json must contain a JSON array")
        self.semantics = parsed

    def add_file(self, path: str, data: bytes) -> None:
        self.files[path] = bytes(data)

    @classmethod
    def from_semantics_bytes(
        cls,
        definition: LibraryDefinition,
        semantics: Optional[bytes],
        files: Optional[Dict[str, bytes]] = None,
    ) -> Library:
        library = cls(definition=definition, files=dict(files or {}))
        if semantics is not None:
            library.set_semantics_bytes(semantics)
        return library

    def __repr__(self) -> str:
        version = self.definition.version_string if self.definition else "?"
        return f"Library({self.directory!r}, version={version}, files={len(self.files)})"
