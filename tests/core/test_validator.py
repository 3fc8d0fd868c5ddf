"""
Unit Tests for package validation.

Validation accumulates: every broken rule shows up in one result.
"""

import pytest

from h5p_toolkit.core.models.fields import Field
from h5p_toolkit.core.models.library import Library, LibraryDefinition, LibraryDependency
from h5p_toolkit.core.models.package import Package, PackageDefinition
from h5p_toolkit.core.schemas.validator import (
    ValidationError,
    ValidationIssue,
    ValidationResult,
    validate_package,
)


def _fields(result: ValidationResult) -> list:
    return [issue.field for issue in result.errors]


class TestValidationResult:
    """Tests for the ValidationResult container."""

    def test_ok_when_only_warnings_then_true(self):
        result = ValidationResult()
        result.add_warning("mainLibrary", "not bundled")

        assert result.ok
        assert len(result.warnings) == 1
        assert str(result.warnings[0]) == "warning: mainLibrary: not bundled"

    def test_raise_if_invalid_when_errors_then_carries_all(self):
        result = ValidationResult()
        result.add_error("title", "Title cannot be empty")
        result.add_error("language", "Language cannot be empty")

        with pytest.raises(ValidationError, match="2 validation error") as excinfo:
            result.raise_if_invalid()

        assert [issue.field for issue in excinfo.value.issues] == ["title", "language"]

    def test_raise_if_invalid_when_ok_then_no_error(self):
        ValidationResult().raise_if_invalid()

    def test_extend_when_other_result_then_merged(self):
        first = ValidationResult([ValidationIssue("a", "x")])
        second = ValidationResult([ValidationIssue("b", "y")])

        assert first.extend(second) is first
        assert [issue.field for issue in first.issues] == ["a", "b"]


class TestValidatePackage:
    """Tests for validate_package."""

    @pytest.fixture
    def package(self, multichoice_library) -> Package:
        package = Package.new()
        package.set_package_definition(PackageDefinition(
            title="Quiz",
            main_library="H5P.MultiChoice",
            language="en",
            preloaded_dependencies=(LibraryDependency("H5P.MultiChoice", 1, 16),),
        ))
        package.set_content({"question": "2 + 2?", "answers": [{"text": "4", "correct": True}]})
        package.add_library(multichoice_library)
        return package

    def test_validate_when_valid_then_no_issues(self, package):
        result = validate_package(package)

        assert result.ok
        assert result.issues == []

    def test_validate_when_strict_and_valid_then_no_issues(self, package):
        assert validate_package(package, strict=True).issues == []

    def test_validate_when_empty_package_then_reports_definition_and_content(self):
        result = validate_package(Package.new())

        assert _fields(result) == ["h5p.json", "content"]

    def test_validate_when_several_problems_then_all_reported(self, package):
        package.set_package_definition(PackageDefinition(
            title="  ",
            main_library="",
            language="",
            embed_types=("popup",),
        ))

        result = validate_package(package)

        assert set(_fields(result)) == {"title", "language", "mainLibrary", "embedTypes"}

    def test_validate_when_main_library_not_bundled_then_warning(self, package):
        package.set_package_definition(PackageDefinition(
            title="Quiz",
            main_library="H5P.QuestionSet",
            preloaded_dependencies=(LibraryDependency("H5P.QuestionSet", 1, 20),),
        ))

        result = validate_package(package)

        assert result.ok
        assert [issue.field for issue in result.warnings] == ["mainLibrary"]

    def test_validate_when_dependency_version_negative_then_error(self, package):
        package.set_package_definition(PackageDefinition(
            title="Quiz",
            main_library="H5P.MultiChoice",
            preloaded_dependencies=(LibraryDependency("H5P.MultiChoice", -1, 16),),
        ))

        assert _fields(validate_package(package)) == ["preloadedDependencies[0].majorVersion"]

    def test_validate_when_library_definition_missing_then_error(self, package):
        package.add_library(Library(directory="H5P.Orphan-1.0"))

        assert _fields(validate_package(package)) == ["libraries[H5P.Orphan-1.0].library.json"]

    def test_validate_when_preloaded_file_missing_then_warning(self, package, multichoice_library):
        del multichoice_library.files["css/multichoice.css"]

        result = validate_package(package)

        assert result.ok
        assert [issue.value for issue in result.warnings] == ["css/multichoice.css"]

    def test_validate_when_options_shape_mismatch_then_ambiguous_schema_error(self, package):
        library = Library(definition=LibraryDefinition("Broken", "H5P.Broken", 1, 0))
        library.semantics = [
            {"name": "content", "type": "library", "options": [{"value": "a", "label": "A"}]},
        ]
        package.add_library(library)

        result = validate_package(package)

        assert _fields(result) == ["libraries[H5P.Broken-1.0].semantics.content.options"]
        assert "Ambiguous schema" in result.errors[0].message

    def test_validate_when_semantics_not_array_then_error(self, package):
        library = Library(definition=LibraryDefinition("Broken", "H5P.Broken", 1, 0))
        library.semantics = {"name": "content"}
        package.add_library(library)

        assert _fields(validate_package(package)) == ["libraries[H5P.Broken-1.0].semantics"]

    @pytest.mark.parametrize("semantics", [
        [{"name": "a", "type": "text", "tags": 5}],
        [{"name": "g", "type": "group", "fields": 3}],
        [{"name": "t", "type": "text", "showWhen": {"rules": ["type"]}}],
    ])
    def test_validate_when_semantics_member_has_wrong_type_then_error(self, package, semantics):
        library = Library(definition=LibraryDefinition("Broken", "H5P.Broken", 1, 0))
        library.semantics = semantics
        package.add_library(library)

        result = validate_package(package)

        assert _fields(result) == ["libraries[H5P.Broken-1.0].semantics"]
        assert "Semantics cannot be decoded" in result.errors[0].message

    def test_validate_when_library_options_not_a_list_then_ambiguous_schema_error(self, package):
        library = Library(definition=LibraryDefinition("Broken", "H5P.Broken", 1, 0))
        library.semantics = [{"name": "content", "type": "library", "options": "H5P.Image 1.1"}]
        package.add_library(library)

        result = validate_package(package)

        assert _fields(result) == ["libraries[H5P.Broken-1.0].semantics.content.options"]
        assert result.errors[0].value == "H5P.Image 1.1"

    def test_validate_when_strict_and_bad_machine_name_then_schema_error(self, package):
        library = Library(
            directory="H5P.Bad-1.0",
            definition=LibraryDefinition("Bad", "H5P Bad!", 1, 0),
        )
        library.set_fields([Field(name="question", type="text")])
        package.add_library(library)

        lenient = validate_package(package)
        strict = validate_package(package, strict=True)

        assert lenient.ok
        assert "H5P.Bad-1.0/library.json:machineName" in _fields(strict)
