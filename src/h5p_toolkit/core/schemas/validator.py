"""
Schema Validation Utilities

Validates packages before writing and after reading.

Validation never stops at the first problem: every check runs and each
violation becomes a ValidationIssue in the returned ValidationResult, so a
caller can report everything in one pass. Content-level validation
(h5p_toolkit.content.validation) returns the same ValidationResult type and
the two can be merged with `extend()`.

Strict mode additionally checks h5p.json and every library.json against the
JSON Schemas shipped next to this module, using jsonschema.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Literal, Optional, Union

from jsonschema import Draft7Validator

from h5p_toolkit.errors import H5PError
from h5p_toolkit.core.models.fields import iter_fields, options_mismatch, parse_semantics
from h5p_toolkit.core.models.library import Library, LibraryDependency
from h5p_toolkit.core.models.package import Package, PackageDefinition

logger = logging.getLogger(__name__)

Severity = Literal["error", "warning"]

EMBED_TYPES = ("div", "iframe")

# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """
    One violated rule.

    Attributes:
        field: Dotted path of the offending field, e.g. "behaviour.passPercentage"
        message: Human-readable description
        value: The offending value, when there is one
        severity: "error" fails validation, "warning" does not
    """

    field: str
    message: str
    value: Any = None
    severity: Severity = "error"

    def __str__(self) -> str:
        prefix = "" if self.severity == "error" else "warning: "
        return f"{prefix}{self.field}: {self.message}"


@dataclass
class ValidationResult:
    """Every issue found by one or more validation passes."""

    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "error"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, field: str, message: str, value: Any = None) -> None:
        self.issues.append(ValidationIssue(field, message, value, "error"))

    def add_warning(self, field: str, message: str, value: Any = None) -> None:
        self.issues.append(ValidationIssue(field, message, value, "warning"))

    def extend(self, other: Union[ValidationResult, Iterable[ValidationIssue]]) -> ValidationResult:
        """Append the issues of another result; returns self for chaining."""
        items = other.issues if isinstance(other, ValidationResult) else other
        self.issues.extend(items)
        return self

    def raise_if_invalid(self) -> None:
        """
        Raises:
            ValidationError: If any issue has error severity
        """
        if not self.ok:
            raise ValidationError(self.errors)


class ValidationError(H5PError):
    """Raised when data fails validation. Carries every error found."""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        summary = "; ".join(str(issue) for issue in self.issues) or "validation failed"
        super().__init__(f"{len(self.issues)} validation error(s): {summary}")


# ─────────────────────────────────────────────────────────────────────────────
# Package validation
# ─────────────────────────────────────────────────────────────────────────────

def validate_package(package: Package, *, strict: bool = False) -> ValidationResult:
    """
    Validate a package's definition and libraries.

    The content payload is not inspected here; use
    h5p_toolkit.content.validation.validate_content() for that.

    Args:
        package: Package to check
        strict: If True, also check h5p.json and each library.json against
            the bundled JSON Schemas

    Returns:
        ValidationResult with every issue found
    """
    result = ValidationResult()

    if package.definition is None:
        result.add_error("h5p.json", "Package definition is missing")
    else:
        _validate_definition(package, package.definition, result)
        if strict:
            _validate_against_schema("h5p", package.definition.to_dict(), "h5p.json", result)

    if package.content is None:
        result.add_error("content", "Package content is missing")

    for directory, library in package.libraries.items():
        _validate_library(directory, library, result)
        if strict and library.definition is not None:
            _validate_against_schema(
                "library", library.definition.to_dict(), f"{directory}/library.json", result
            )

    if result.issues:
        logger.debug(f"Package validation found {len(result.errors)} error(s), "
                     f"{len(result.warnings)} warning(s)")
    return result


def _validate_definition(package: Package, definition: PackageDefinition, result: ValidationResult) -> None:
    if not definition.title.strip():
        result.add_error("title", "Title cannot be empty", definition.title)
    if not definition.language:
        result.add_error("language", "Language cannot be empty", definition.language)

    if not definition.main_library:
        result.add_error("mainLibrary", "Main library cannot be empty")
    elif package.get_library(definition.main_library) is None:
        result.add_warning(
            "mainLibrary",
            f"Main library {definition.main_library!r} is not bundled in the package",
            definition.main_library,
        )

    if not definition.embed_types:
        result.add_error("embedTypes", "At least one embed type is required")
    for embed_type in definition.embed_types:
        if embed_type not in EMBED_TYPES:
            result.add_error(
                "embedTypes", f"Unknown embed type {embed_type!r} (expected div or iframe)", embed_type
            )

    for i, dep in enumerate(definition.preloaded_dependencies):
        _validate_dependency(dep, f"preloadedDependencies[{i}]", result)
    for i, dep in enumerate(definition.editor_dependencies):
        _validate_dependency(dep, f"editorDependencies[{i}]", result)

    if definition.main_library and definition.preloaded_dependencies:
        names = {dep.machine_name for dep in definition.preloaded_dependencies}
        if definition.main_library not in names:
            result.add_warning(
                "preloadedDependencies",
                f"Main library {definition.main_library!r} is not listed as a dependency",
            )


def _validate_dependency(dep: LibraryDependency, path: str, result: ValidationResult) -> None:
    if not dep.machine_name:
        result.add_error(f"{path}.machineName", "Machine name cannot be empty")
    for attr, key in (("major_version", "majorVersion"), ("minor_version", "minorVersion")):
        value = getattr(dep, attr)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            result.add_error(f"{path}.{key}", "Version must be a non-negative integer", value)


def _validate_library(directory: str, library: Library, result: ValidationResult) -> None:
    prefix = f"libraries[{directory}]"
    definition = library.definition

    if definition is None:
        result.add_error(f"{prefix}.library.json", "Library definition is missing")
    else:
        if not definition.machine_name:
            result.add_error(f"{prefix}.machineName", "Machine name cannot be empty")
        if not definition.title:
            result.add_error(f"{prefix}.title", "Title cannot be empty")
        for key, value in zip(("majorVersion", "minorVersion", "patchVersion"), definition.version):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                result.add_error(f"{prefix}.{key}", "Version must be a non-negative integer", value)
        if definition.machine_name and not directory.startswith(definition.machine_name):
            result.add_warning(
                f"{prefix}.machineName",
                f"Directory does not match machine name {definition.machine_name!r}",
                directory,
            )
        for i, ref in enumerate(definition.preloaded_js + definition.preloaded_css):
            if ref.path not in library.files:
                result.add_warning(
                    f"{prefix}.preloaded[{i}]", f"Preloaded file {ref.path!r} is not bundled", ref.path
                )

    if library.semantics is not None:
        _validate_semantics(prefix, library.semantics, result)


def _validate_semantics(prefix: str, semantics: Any, result: ValidationResult) -> None:
    try:
        fields = parse_semantics(semantics)
    except ValueError as e:
        result.add_error(f"{prefix}.semantics", f"Semantics cannot be decoded: {e}")
        return

    for path, f in iter_fields(fields):
        if not f.name and not path.endswith("[]"):
            result.add_error(f"{prefix}.semantics.{path}", "Field name cannot be empty")
        problem = options_mismatch(f)
        if problem:
            result.add_error(
                f"{prefix}.semantics.{path}.options",
                f"Ambiguous schema: {problem}",
                list(f.options) if isinstance(f.options, tuple) else f.options,
            )


def _validate_against_schema(
    name: str,
    data: dict,
    label: str,
    result: ValidationResult,
    schema: Optional[dict] = None,
) -> None:
    validator = Draft7Validator(schema or _load_schema(name))
    for error in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]):
        location = ".".join(str(p) for p in error.absolute_path)
        field_name = f"{label}:{location}" if location else label
        result.add_error(field_name, f"Schema validation failed: {error.message}", error.instance)
