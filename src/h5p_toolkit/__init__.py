"""Top-level package for the H5P toolkit.

Provides subpackages:
- h5p_toolkit.core – package/library models, the semantics Field codec, validation
- h5p_toolkit.archive – reading and writing .h5p archives
- h5p_toolkit.content – question-set and multiple-choice content, builder
- h5p_toolkit.semantics – semantics.json providers
- h5p_toolkit.cli – command line entry point
"""


def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.1.0"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("h5p-toolkit")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
