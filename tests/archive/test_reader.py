"""
Unit tests for the archive reader and entry classification.
"""

import json
import zipfile
from io import BytesIO

import pytest

from h5p_toolkit.archive.layout import EntryKind, classify_entry
from h5p_toolkit.archive.reader import ArchiveReader, extract_package, load_package
from h5p_toolkit.config import ArchiveConfig
from h5p_toolkit.errors import ArchiveReadError, MalformedEntryError, UnsafePathError


H5P_JSON = json.dumps({
    "title": "Quiz",
    "language": "en",
    "mainLibrary": "H5P.MultiChoice",
    "embedTypes": ["div"],
    "preloadedDependencies": [{"machineName": "H5P.MultiChoice", "majorVersion": 1, "minorVersion": 16}],
}).encode()

LIBRARY_JSON = json.dumps({
    "title": "Multiple Choice",
    "machineName": "H5P.MultiChoice",
    "majorVersion": 1,
    "minorVersion": 16,
    "patchVersion": 4,
    "runnable": 1,
}).encode()


def make_archive(entries) -> bytes:
    """Build a ZIP from (name, bytes) pairs, in the given order."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buffer.getvalue()


class TestClassifyEntry:
    """Tests for path-based entry classification."""

    @pytest.mark.parametrize("name, kind, directory, path", [
        ("h5p.json", EntryKind.PACKAGE_DEFINITION, "", "h5p.json"),
        ("content/content.json", EntryKind.CONTENT, "content", "content.json"),
        ("content/images/a.png", EntryKind.CONTENT_FILE, "content", "images/a.png"),
        ("H5P.Foo-1.0/library.json", EntryKind.LIBRARY_DEFINITION, "H5P.Foo-1.0", "library.json"),
        ("H5P.Foo-1.0/semantics.json", EntryKind.SEMANTICS, "H5P.Foo-1.0", "semantics.json"),
        ("H5P.Foo-1.0/js/foo.js", EntryKind.LIBRARY_FILE, "H5P.Foo-1.0", "js/foo.js"),
        ("H5P.Foo-1.0/vendor/library.json", EntryKind.LIBRARY_FILE, "H5P.Foo-1.0", "vendor/library.json"),
        ("README.txt", EntryKind.ROOT_FILE, "", "README.txt"),
    ])
    def test_classify_when_path_given_then_kind(self, name, kind, directory, path):
        assert tuple(classify_entry(name)) == (kind, directory, path)


class TestArchiveReader:
    """Tests for ArchiveReader.read."""

    def test_read_when_complete_archive_then_all_parts_loaded(self):
        data = make_archive([
            ("h5p.json", H5P_JSON),
            ("content/content.json", b'{"question": "2 + 2?"}'),
            ("content/images/a.png", b"png"),
            ("H5P.MultiChoice-1.16/library.json", LIBRARY_JSON),
            ("H5P.MultiChoice-1.16/semantics.json", b'[{"name": "question", "type": "text"}]'),
            ("H5P.MultiChoice-1.16/js/multichoice.js", b"js"),
        ])

        package = load_package(data)

        assert package.definition.title == "Quiz"
        assert package.content == {"question": "2 + 2?"}
        assert package.content_files == {"images/a.png": b"png"}
        library = package.libraries["H5P.MultiChoice-1.16"]
        assert library.definition.version == (1, 16, 4)
        assert library.definition.runnable is True
        assert library.semantics == [{"name": "question", "type": "text"}]
        assert library.files == {"js/multichoice.js": b"js"}

    def test_read_when_files_before_library_json_then_same_library(self):
        data = make_archive([
            ("H5P.MultiChoice-1.16/js/multichoice.js", b"js"),
            ("H5P.MultiChoice-1.16/semantics.json", b"[]"),
            ("H5P.MultiChoice-1.16/library.json", LIBRARY_JSON),
        ])

        package = load_package(data)

        assert list(package.libraries) == ["H5P.MultiChoice-1.16"]
        library = package.libraries["H5P.MultiChoice-1.16"]
        assert library.definition.machine_name == "H5P.MultiChoice"
        assert library.semantics == []
        assert library.files == {"js/multichoice.js": b"js"}

    def test_read_when_unprefixed_folder_has_library_json_later_then_files_attached(self):
        """Files met before their folder is known to be a library are held, then attached."""
        data = make_archive([
            ("Quiz.MultiChoice-1.16/js/quiz.js", b"js"),
            ("Quiz.MultiChoice-1.16/library.json", json.dumps({
                "title": "Quiz", "machineName": "Quiz.MultiChoice",
                "majorVersion": 1, "minorVersion": 16, "patchVersion": 0, "runnable": True,
            }).encode()),
        ])
        reader = ArchiveReader()

        package = reader.read(data)

        assert package.libraries["Quiz.MultiChoice-1.16"].files == {"js/quiz.js": b"js"}
        assert reader.skipped_entries == []

    def test_read_when_unknown_folder_and_root_file_then_skipped_and_logged(self, caplog):
        data = make_archive([
            ("h5p.json", H5P_JSON),
            ("README.txt", b"readme"),
            ("assets/logo.svg", b"<svg/>"),
        ])
        reader = ArchiveReader()

        with caplog.at_level("WARNING", logger="h5p_toolkit.archive.reader"):
            package = reader.read(data)

        assert package.libraries == {}
        assert reader.skipped_entries == ["README.txt", "assets/logo.svg"]
        assert "Ignored 2 unrecognized archive entries" in caplog.text

    def test_read_when_custom_prefix_then_folder_is_library(self):
        data = make_archive([("Quiz.Extra-1.0/css/extra.css", b"css")])
        reader = ArchiveReader(ArchiveConfig(library_prefixes=("H5P.", "Quiz.")))

        package = reader.read(data)

        assert package.libraries["Quiz.Extra-1.0"].files == {"css/extra.css": b"css"}
        assert package.libraries["Quiz.Extra-1.0"].definition is None

    def test_read_when_no_h5p_json_then_definition_none(self):
        package = load_package(make_archive([("content/content.json", b"{}")]))

        assert package.definition is None
        assert package.content == {}

    def test_read_when_stream_source_then_loaded(self, tmp_path):
        path = tmp_path / "quiz.h5p"
        path.write_bytes(make_archive([("h5p.json", H5P_JSON)]))

        with open(path, "rb") as f:
            assert load_package(f).definition.main_library == "H5P.MultiChoice"
        assert load_package(str(path)).definition.title == "Quiz"

    def test_read_when_entry_names_not_normalized_then_normalized(self):
        data = make_archive([("./H5P.MultiChoice-1.16//js/./multichoice.js", b"js")])

        package = load_package(data)

        assert package.libraries["H5P.MultiChoice-1.16"].files == {"js/multichoice.js": b"js"}


class TestReaderErrors:
    """Tests for malformed and hostile archives."""

    @pytest.mark.parametrize("entry", [
        "h5p.json",
        "content/content.json",
        "H5P.MultiChoice-1.16/library.json",
        "H5P.MultiChoice-1.16/semantics.json",
    ])
    def test_read_when_structural_entry_malformed_then_names_entry(self, entry):
        data = make_archive([(entry, b'{"broken": ')])

        with pytest.raises(MalformedEntryError) as excinfo:
            load_package(data)

        assert excinfo.value.entry == entry

    def test_read_when_semantics_is_object_then_malformed(self):
        data = make_archive([("H5P.Foo-1.0/semantics.json", b'{"name": "x"}')])

        with pytest.raises(MalformedEntryError, match="JSON array"):
            load_package(data)

    def test_read_when_h5p_json_is_array_then_malformed(self):
        with pytest.raises(MalformedEntryError, match="h5p.json"):
            load_package(make_archive([("h5p.json", b"[]")]))

    @pytest.mark.parametrize("entry, member", [
        ("H5P.X-1.0/library.json", {"preloadedJs": ["js/x.js"]}),
        ("H5P.X-1.0/library.json", {"dropLibraryCss": ["H5P.Y"]}),
        ("H5P.X-1.0/library.json", {"minorVersion": "0"}),
        ("H5P.X-1.0/library.json", {"runnable": "yes"}),
        ("h5p.json", {"preloadedDependencies": ["H5P.X 1.0"]}),
        ("h5p.json", {"embedTypes": "div"}),
    ])
    def test_read_when_member_has_wrong_type_then_malformed(self, entry, member):
        data = {"title": "X", "machineName": "H5P.X", "mainLibrary": "H5P.X", "majorVersion": 1, "minorVersion": 0}
        data.update(member)

        with pytest.raises(MalformedEntryError) as excinfo:
            load_package(make_archive([(entry, json.dumps(data).encode())]))

        assert excinfo.value.entry == entry
        assert next(iter(member)) in excinfo.value.reason

    def test_read_when_not_a_zip_then_archive_read_error(self):
        with pytest.raises(ArchiveReadError):
            load_package(b"this is not a zip file")

    def test_read_when_file_missing_then_archive_read_error(self, tmp_path):
        with pytest.raises(ArchiveReadError):
            load_package(tmp_path / "missing.h5p")

    @pytest.mark.parametrize("name", ["../evil.js", "H5P.Foo-1.0/../../evil.js", "/abs/evil.js"])
    def test_read_when_entry_escapes_then_unsafe_path(self, name):
        with pytest.raises(UnsafePathError):
            load_package(make_archive([(name, b"evil")]))


class TestExtractPackage:
    """Tests for extract_package."""

    def test_extract_when_safe_then_files_written(self, tmp_path):
        data = make_archive([
            ("h5p.json", H5P_JSON),
            ("H5P.MultiChoice-1.16/js/multichoice.js", b"js"),
        ])

        written = extract_package(data, tmp_path / "out")

        assert [p.relative_to((tmp_path / "out").resolve()).as_posix() for p in written] == [
            "h5p.json",
            "H5P.MultiChoice-1.16/js/multichoice.js",
        ]
        assert (tmp_path / "out" / "H5P.MultiChoice-1.16" / "js" / "multichoice.js").read_bytes() == b"js"

    def test_extract_when_entry_escapes_then_nothing_written(self, tmp_path):
        data = make_archive([("h5p.json", H5P_JSON), ("../evil.js", b"evil")])

        with pytest.raises(UnsafePathError):
            extract_package(data, tmp_path / "out")

        assert not (tmp_path / "out").exists()
        assert not (tmp_path / "evil.js").exists()
