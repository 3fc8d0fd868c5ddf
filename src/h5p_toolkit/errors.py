"""
Module: errors

Purpose:
    Exception hierarchy shared by every h5p_toolkit module. Everything the
    library raises on purpose derives from H5PError so callers can catch
    one base class.

Hierarchy:
    H5PError
    ├── ArchiveError
    │   ├── ArchiveReadError
    │   ├── ArchiveWriteError
    │   ├── MalformedEntryError
    │   └── UnsafePathError
    ├── AmbiguousSchemaError
    ├── DuplicateLibraryError
    └── BuilderError

    ValidationError lives in core.schemas.validator because it carries
    ValidationIssue records.
"""

from __future__ import annotations

from typing import Optional


class H5PError(Exception):
    """Base class for h5p_toolkit errors."""


class ArchiveError(H5PError):
    """Raised when an archive cannot be produced or consumed."""


class ArchiveReadError(ArchiveError):
    """The archive container itself could not be read."""


class ArchiveWriteError(ArchiveError):
    """An archive entry could not be written."""

    def __init__(self, message: str, entry: Optional[str] = None):
        super().__init__(message)
        self.entry = entry


class MalformedEntryError(ArchiveError):
    """A structurally required JSON entry could not be parsed."""

    def __init__(self, entry: str, reason: str):
        super().__init__(f"Malformed archive entry {entry!r}: {reason}")
        self.entry = entry
        self.reason = reason


class UnsafePathError(ArchiveError):
    """A path is absolute or escapes the directory it belongs to."""

    def __init__(self, path: str, reason: str = "escapes its root"):
        super().__init__(f"Unsafe path {path!r}: {reason}")
        self.path = path


class AmbiguousSchemaError(H5PError):
    """A field's options payload does not match its declared type."""

    def __init__(self, field_name: str, field_type: str, detail: str = ""):
        message = f"Options of field {field_name!r} do not match type {field_type!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.field_name = field_name
        self.field_type = field_type


class DuplicateLibraryError(H5PError):
    """A library with the same directory name is already in the package."""

    def __init__(self, directory: str):
        super().__init__(f"Library {directory!r} is already part of the package")
        self.directory = directory


class BuilderError(H5PError):
    """Content could not be assembled by a builder."""
