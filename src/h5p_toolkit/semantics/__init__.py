"""
Semantics Package

Providers of semantics.json data and the library factory that uses them.
"""

from .providers import (
    BundledSemantics,
    DirectorySemantics,
    SemanticsProvider,
    build_library,
)

__all__ = [
    "BundledSemantics",
    "DirectorySemantics",
    "SemanticsProvider",
    "build_library",
]
