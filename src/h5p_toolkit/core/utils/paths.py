"""Archive path utilities.

Every path that ends up as a ZIP entry name, or that comes out of one,
goes through `normalize_relative_path()` first. ZIP names always use
forward slashes, so paths are handled as POSIX strings regardless of
platform.
"""

from __future__ import annotations

import posixpath
import re

from h5p_toolkit.errors import UnsafePathError

_DRIVE = re.compile(r"^[A-Za-z]:")


def normalize_relative_path(path: str) -> str:
    """Normalize a path that must stay inside the directory it belongs to.

    Backslashes become slashes, "." segments and repeated slashes are
    collapsed and "a/../b" is resolved to "b".

    Args:
        path: Relative path like "js/main.js" or "./css//style.css".

    Returns:
        The normalized path.

    Raises:
        UnsafePathError: If the path is empty, absolute, carries a drive
            letter, or climbs out of its root.

    Examples:
        >>> normalize_relative_path("./js//main.js")
        'js/main.js'
        >>> normalize_relative_path("images/../icon.svg")
        'icon.svg'
    """
    if not path or not path.strip():
        raise UnsafePathError(path, "empty path")
    if "\x00" in path:
        raise UnsafePathError(path, "contains a NUL byte")

    candidate = path.replace("\\", "/")
    if candidate.startswith("/") or _DRIVE.match(candidate):
        raise UnsafePathError(path, "absolute path")

    normalized = posixpath.normpath(candidate)
    if normalized == "." or normalized == ".." or normalized.startswith("../"):
        raise UnsafePathError(path, "escapes its root")
    return normalized


def join_entry(directory: str, relative: str) -> str:
    """Join a top-level directory and a relative path into an entry name.

    Raises:
        UnsafePathError: If either part is unsafe or the directory is nested.

    Examples:
        >>> join_entry("H5P.MultiChoice-1.16", "js/multichoice.js")
        'H5P.MultiChoice-1.16/js/multichoice.js'
    """
    top = normalize_relative_path(directory)
    if "/" in top:
        raise UnsafePathError(directory, "directory must be a single path segment")
    return f"{top}/{normalize_relative_path(relative)}"


def split_entry(name: str) -> tuple[str, str]:
    """Split an entry name into (first segment, remainder).

    Examples:
        >>> split_entry("H5P.Foo-1.0/js/foo.js")
        ('H5P.Foo-1.0', 'js/foo.js')
        >>> split_entry("h5p.json")
        ('', 'h5p.json')
    """
    if "/" not in name:
        return "", name
    head, _, tail = name.partition("/")
    return head, tail
