"""
Unit tests for ArchiveConfig.
"""

import zipfile

import pytest

from h5p_toolkit.config import DEFAULT_CONFIG, ZIP_EPOCH, ArchiveConfig


class TestArchiveConfig:
    """Tests for ArchiveConfig validation."""

    def test_defaults_when_created_then_deterministic(self):
        assert DEFAULT_CONFIG.library_prefixes == ("H5P.",)
        assert DEFAULT_CONFIG.sort_files is True
        assert DEFAULT_CONFIG.fixed_timestamp == ZIP_EPOCH

    def test_is_library_directory_when_prefix_matches_then_true(self):
        config = ArchiveConfig(library_prefixes=("H5P.", "Quiz."))

        assert config.is_library_directory("Quiz.MultiChoice-1.16")
        assert not config.is_library_directory("assets")

    @pytest.mark.parametrize("kwargs, message", [
        ({"library_prefixes": "H5P."}, "not a string"),
        ({"library_prefixes": ("",)}, "empty prefixes"),
        ({"compression": zipfile.ZIP_LZMA}, "Unsupported compression"),
        ({"compress_level": 10}, "compress_level"),
        ({"json_indent": -1}, "json_indent"),
        ({"fixed_timestamp": (1979, 12, 31, 0, 0, 0)}, "ZIP epoch"),
    ])
    def test_init_when_invalid_then_raises(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            ArchiveConfig(**kwargs)
