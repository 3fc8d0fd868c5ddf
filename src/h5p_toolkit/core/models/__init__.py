"""
Core Models Package

Entity model for H5P packages.

Value types (Field, LibraryDependency, LibraryDefinition, PackageDefinition)
are frozen dataclasses with to_dict()/from_dict(). The containers that get
assembled step by step (Library, Package) are mutable.

| JSON file          | Model               |
|--------------------|---------------------|
| `h5p.json`         | `PackageDefinition` |
| `library.json`     | `LibraryDefinition` |
| `semantics.json`   | `Field` tree        |
| whole archive      | `Package`           |
"""

from .fields import (
    Field,
    FieldType,
    SelectOption,
    ShowRule,
    ShowWhen,
    decode_options,
    dump_semantics,
    iter_fields,
    library_options,
    parse_semantics,
    select_options,
)
from .library import FileReference, Library, LibraryDefinition, LibraryDependency
from .package import Package, PackageDefinition

__all__ = [
    "Field",
    "FieldType",
    "SelectOption",
    "ShowRule",
    "ShowWhen",
    "decode_options",
    "dump_semantics",
    "iter_fields",
    "library_options",
    "parse_semantics",
    "select_options",
    "FileReference",
    "Library",
    "LibraryDefinition",
    "LibraryDependency",
    "Package",
    "PackageDefinition",
]
