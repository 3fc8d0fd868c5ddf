"""
H5P Toolkit Core Package

Data models and utilities shared by the archive, content and semantics
packages.

**DESIGN NOTES:**

1. **Immutable Definitions, Mutable Containers**
   - h5p.json, library.json and semantics fields are frozen dataclasses
   - Package and Library are mutable; they are assembled step by step

2. **Type Before Shape**
   - A field's "options" payload is read according to its declared type,
     never guessed from the JSON shape

3. **Opaque Content**
   - content.json is kept as plain JSON; typed views live in h5p_toolkit.content
"""

from .models import (
    Field,
    FieldType,
    Library,
    LibraryDefinition,
    LibraryDependency,
    Package,
    PackageDefinition,
    SelectOption,
)

__all__ = [
    "Field",
    "FieldType",
    "Library",
    "LibraryDefinition",
    "LibraryDependency",
    "Package",
    "PackageDefinition",
    "SelectOption",
]
