"""
Unit tests for PathCanonicalizer.

Tests cover:
- Separator normalization
- %NAME% environment variable expansion
- Removal of "." segments while ".." survives
- Trailing separator for existing directories only
"""

from pathlib import Path

import pytest

from treesync.scanning import PathCanonicalizer, canonicalize


@pytest.mark.unit
class TestSeparators:
    """Tests for separator normalization."""

    def test_backslashes_become_forward_slashes(self):
        assert canonicalize("C:\\data\\photos", environ={}) == "C:/data/photos"

    def test_repeated_separators_collapse(self):
        assert canonicalize("/data//photos///2024", environ={}) == "/data/photos/2024"

    def test_unc_prefix_is_kept(self):
        assert canonicalize("\\\\server\\share\\docs", environ={}) == "//server/share/docs"


@pytest.mark.unit
class TestVariableExpansion:
    """Tests for %NAME% expansion."""

    def test_variable_segment_is_substituted(self):
        result = canonicalize("%BACKUP%/photos", environ={"BACKUP": "/mnt/backup"})
        assert result == "/mnt/backup/photos"

    def test_variable_inside_segment_is_substituted(self):
        result = canonicalize("/home/%USER%-data/x", environ={"USER": "ada"})
        assert result == "/home/ada-data/x"

    def test_unset_variable_expands_to_empty(self):
        assert canonicalize("/data/%MISSING%/photos", environ={}) == "/data/photos"

    def test_variable_value_with_backslashes_is_normalized(self):
        result = canonicalize("%ROOT%\\docs", environ={"ROOT": "D:\\archive"})
        assert result == "D:/archive/docs"

    def test_single_percent_is_left_alone(self):
        assert canonicalize("/data/100%/x", environ={}) == "/data/100%/x"

    def test_expansion_can_be_disabled(self):
        path = "/data/%HOME%/x"
        assert canonicalize(path, environ={"HOME": "/root"}, expand_variables=False) == path

    def test_environment_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("TREESYNC_TEST_ROOT", "/srv")
        assert PathCanonicalizer().canonicalize("%TREESYNC_TEST_ROOT%/x") == "/srv/x"


@pytest.mark.unit
class TestDotSegments:
    """Tests for "." and ".." handling."""

    def test_current_directory_segments_are_removed(self):
        assert canonicalize("/data/./photos/./x.jpg", environ={}) == "/data/photos/x.jpg"

    def test_parent_segments_survive(self):
        assert canonicalize("/data/../photos/x.jpg", environ={}) == "/data/../photos/x.jpg"

    def test_parent_segment_next_to_current_segment(self):
        assert canonicalize("./../x/./..", environ={}) == "../x/.."

    def test_names_ending_in_dot_are_untouched(self):
        assert canonicalize("/data/file./x", environ={}) == "/data/file./x"

    def test_lone_dot(self, temp_dir: Path, monkeypatch):
        monkeypatch.chdir(temp_dir)
        assert canonicalize(".", environ={}) == "./"


@pytest.mark.unit
class TestDirectorySuffix:
    """Tests for the trailing separator rule."""

    def test_existing_directory_gets_suffix(self, temp_dir: Path):
        result = canonicalize(str(temp_dir), environ={})
        assert result.endswith("/")
        assert result == str(temp_dir).replace("\\", "/") + "/"

    def test_existing_directory_suffix_not_doubled(self, temp_dir: Path):
        once = canonicalize(str(temp_dir), environ={})
        assert canonicalize(once, environ={}) == once

    def test_file_gets_no_suffix(self, temp_dir: Path):
        file_path = temp_dir / "note.txt"
        file_path.write_text("x")
        assert not canonicalize(str(file_path), environ={}).endswith("/")

    def test_missing_directory_gets_no_suffix(self, temp_dir: Path):
        missing = temp_dir / "not-there"
        assert not canonicalize(str(missing), environ={}).endswith("/")


@pytest.mark.unit
class TestAnchor:
    """Tests for joining relative paths onto a base directory."""

    def test_relative_path_joined_onto_base(self):
        canonicalizer = PathCanonicalizer(environ={})
        assert canonicalizer.anchor("photos", "/home/ada") == "/home/ada/photos"

    def test_absolute_path_kept(self):
        canonicalizer = PathCanonicalizer(environ={})
        assert canonicalizer.anchor("/srv/photos", "/home/ada") == "/srv/photos"

    def test_drive_path_kept(self):
        canonicalizer = PathCanonicalizer(environ={})
        assert canonicalizer.anchor("E:\\photos", "/home/ada") == "E:/photos"

    def test_variable_expanding_to_absolute_path_kept(self):
        canonicalizer = PathCanonicalizer(environ={"DATA": "/srv"})
        assert canonicalizer.anchor("%DATA%/photos", "/home/ada") == "/srv/photos"
