"""
Tests for the h5p-toolkit command line.
"""

import json
import zipfile

import pytest

from h5p_toolkit.archive.writer import write_package
from h5p_toolkit.cli import build_parser, main


@pytest.fixture
def archive(geography_package, tmp_path):
    return write_package(geography_package, tmp_path / "geography.h5p")


class TestParseQuestionSet:
    """Tests for the parse-questionset command."""

    def test_parse_when_valid_then_summary_and_exit_zero(self, geography_package, tmp_path, capsys):
        path = tmp_path / "content.json"
        path.write_text(json.dumps(geography_package.content), encoding="utf-8")

        code = main(["parse-questionset", str(path)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Title: Geography Quiz" in out
        assert "Questions: 1" in out
        assert "Pass percentage: 60%" in out
        assert "Question 1: Quiz.MultiChoice 1.16" in out
        assert "[x] Paris" in out
        assert "[ ] London" in out

    def test_parse_when_invalid_then_issues_and_exit_one(self, geography_package, tmp_path, capsys):
        content = dict(geography_package.content, passPercentage=150)
        path = tmp_path / "content.json"
        path.write_text(json.dumps(content), encoding="utf-8")

        code = main(["parse-questionset", str(path)])

        assert code == 1
        assert "passPercentage: Pass percentage must be" in capsys.readouterr().out

    def test_parse_when_library_not_string_then_reported_not_crashed(self, geography_package, tmp_path, capsys):
        content = dict(geography_package.content)
        content["questions"] = [dict(content["questions"][0], library=5)]
        path = tmp_path / "content.json"
        path.write_text(json.dumps(content), encoding="utf-8")

        code = main(["parse-questionset", str(path)])

        out = capsys.readouterr().out
        assert code == 1
        assert "Question 1: 5" in out
        assert "questions[0].library: Invalid library reference: 5" in out

    def test_parse_when_malformed_json_then_exit_two(self, tmp_path, capsys):
        path = tmp_path / "content.json"
        path.write_text("{", encoding="utf-8")

        assert main(["parse-questionset", str(path)]) == 2
        assert "error:" in capsys.readouterr().err

    def test_parse_when_missing_file_then_exit_two(self, tmp_path, capsys):
        assert main(["parse-questionset", str(tmp_path / "missing.json")]) == 2


class TestInspect:
    """Tests for the inspect command."""

    def test_inspect_when_archive_then_lists_libraries(self, archive, capsys):
        code = main(["inspect", str(archive)])

        out = capsys.readouterr().out
        assert code == 0
        assert "Title: Geography Quiz" in out
        assert "Main library: Quiz.MultiChoice" in out
        assert "Quiz.MultiChoice-1.16 (version 1.16.0, 1 files, 6 top-level fields)" in out

    def test_inspect_when_not_zip_then_exit_two(self, tmp_path, capsys):
        path = tmp_path / "broken.h5p"
        path.write_bytes(b"not a zip")

        assert main(["inspect", str(path)]) == 2
        assert "Cannot open H5P archive" in capsys.readouterr().err


class TestValidate:
    """Tests for the validate command."""

    def test_validate_when_valid_then_ok(self, archive, capsys):
        assert main(["validate", "--strict", str(archive)]) == 0
        assert capsys.readouterr().out.strip() == f"{archive}: OK"

    def test_validate_when_content_invalid_then_exit_one(self, geography_package, tmp_path, capsys):
        geography_package.content["passPercentage"] = 150
        path = write_package(geography_package, tmp_path / "bad.h5p")

        code = main(["validate", str(path)])

        out = capsys.readouterr().out
        assert code == 1
        assert "INVALID (1 error(s), 0 warning(s))" in out

    def test_validate_when_library_json_has_wrong_types_then_exit_two(self, tmp_path, capsys):
        path = tmp_path / "broken.h5p"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("H5P.X-1.0/library.json", json.dumps({"machineName": "H5P.X", "preloadedJs": ["js/x.js"]}))

        assert main(["validate", str(path)]) == 2
        assert "Malformed archive entry 'H5P.X-1.0/library.json'" in capsys.readouterr().err


class TestParser:
    """Tests for argument parsing."""

    def test_parser_when_no_command_then_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_parser_when_verbose_then_flag_set(self):
        args = build_parser().parse_args(["-v", "inspect", "x.h5p"])

        assert args.verbose is True
        assert args.command == "inspect"
