"""
Unit Tests for JSON serialization utilities.
"""

import pytest

from h5p_toolkit.core.utils.serialization import (
    dump_json,
    load_json_entry,
    load_json_file,
    object_list,
    save_json_file,
    string_list,
    typed_member,
)
from h5p_toolkit.errors import MalformedEntryError


class TestDumpJson:
    """Tests for dump_json."""

    def test_dump_when_unicode_then_utf8_not_escaped(self):
        data = dump_json({"title": "Café"})

        assert data == '{\n  "title": "Café"\n}'.encode("utf-8")

    def test_dump_when_unserializable_then_type_error(self):
        with pytest.raises(TypeError):
            dump_json({"value": object()})


class TestLoadJsonEntry:
    """Tests for load_json_entry."""

    def test_load_when_valid_then_decoded(self):
        assert load_json_entry("h5p.json", b'{"title": "Quiz"}') == {"title": "Quiz"}

    def test_load_when_bom_then_tolerated(self):
        assert load_json_entry("h5p.json", b'\xef\xbb\xbf{"a": 1}') == {"a": 1}

    def test_load_when_invalid_json_then_names_entry(self):
        with pytest.raises(MalformedEntryError, match="content/content.json") as excinfo:
            load_json_entry("content/content.json", b'{"question": ')

        assert excinfo.value.entry == "content/content.json"

    def test_load_when_not_utf8_then_raises(self):
        with pytest.raises(MalformedEntryError, match="not UTF-8"):
            load_json_entry("h5p.json", b'\xff\xfe\x00')


class TestJsonFiles:
    """Tests for load_json_file / save_json_file."""

    def test_save_then_load_when_nested_dir_then_round_trips(self, tmp_path):
        path = tmp_path / "out" / "content.json"

        save_json_file(path, {"questions": []})

        assert load_json_file(path) == {"questions": []}


class TestTypedMembers:
    """Tests for typed access to decoded JSON objects."""

    def test_typed_member_when_absent_or_null_then_default(self):
        assert typed_member({}, "title", str, "") == ""
        assert typed_member({"author": None}, "author", str, None) is None

    def test_typed_member_when_type_matches_then_value(self):
        assert typed_member({"majorVersion": 1}, "majorVersion", int, 0) == 1

    @pytest.mark.parametrize("value", ["1", True, 1.5])
    def test_typed_member_when_not_integer_then_raises(self, value):
        with pytest.raises(ValueError, match="'majorVersion' must be an integer"):
            typed_member({"majorVersion": value}, "majorVersion", int, 0)

    def test_object_list_when_strings_then_raises(self):
        with pytest.raises(ValueError, match="'preloadedJs' must be a list of objects"):
            object_list({"preloadedJs": ["js/x.js"]}, "preloadedJs")

    def test_object_list_when_absent_then_empty(self):
        assert object_list({}, "preloadedJs") == []

    def test_string_list_when_string_then_raises(self):
        with pytest.raises(ValueError, match="'embedTypes' must be a list of strings"):
            string_list({"embedTypes": "div"}, "embedTypes")

    def test_string_list_when_list_then_tuple(self):
        assert string_list({"embedTypes": ["div", "iframe"]}, "embedTypes") == ("div", "iframe")
