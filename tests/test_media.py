"""
Tests for the media module.
"""

from pathlib import Path


class TestFullyQualifiedName:
    """Tests for MediaItem.fully_qualified_name()."""

    def test_plain_name(self, matrix):
        """Test "Title (Year)" formatting."""
        assert matrix.fully_qualified_name() == "The Matrix (1999)"
        assert matrix.fully_qualified_name(file_name_safe=True) == "The Matrix (1999)"

    def test_file_name_safe_strips_characters(self):
        """Test that unsafe characters are removed from the title only."""
        from tvconvert.media import MediaItem

        item = MediaItem("Amélie: Le Fabuleux/Destin?", 2001, Path("x.mkv"))
        assert item.fully_qualified_name(file_name_safe=True) == "Amlie Le FabuleuxDestin (2001)"

    def test_file_name_safe_keeps_allowed_characters(self):
        """Test letters, digits, dash, underscore and space survive."""
        from tvconvert.media import MediaItem

        item = MediaItem("Se7en - Director_Cut", 1995, Path("x.mkv"))
        assert item.fully_qualified_name(file_name_safe=True) == "Se7en - Director_Cut (1995)"

    def test_unsafe_title_preserved_when_not_file_name_safe(self):
        """Test that the title is kept exactly for display."""
        from tvconvert.media import MediaItem

        item = MediaItem("WALL·E", 2008, Path("x.mkv"))
        assert item.fully_qualified_name(file_name_safe=False) == "WALL·E (2008)"

    def test_safe_title_contains_only_allowed_characters(self):
        """Test the safe title never contains a character outside the allowed set."""
        import re

        from tvconvert.media import MediaItem

        item = MediaItem("¿Qué? <Tit*le> \"|\\ 100% [Cut]: ünïcode", 2000, Path("x.mkv"))
        safe_title = item.fully_qualified_name(file_name_safe=True)[: -len(" (2000)")]
        assert re.fullmatch(r"[a-zA-Z0-9\-_ ]*", safe_title)


class TestValidation:
    """Tests for MediaItem validation predicates."""

    def test_valid_item(self, matrix):
        """Test a complete item passes every check."""
        assert matrix.has_valid_title() is True
        assert matrix.has_valid_year() is True
        assert matrix.has_valid_input_file_path() is True

    def test_empty_title_invalid(self, input_file):
        from tvconvert.media import MediaItem

        assert MediaItem("", 1999, input_file).has_valid_title() is False

    def test_non_string_title_invalid(self, input_file):
        from tvconvert.media import MediaItem

        assert MediaItem(42, 1999, input_file).has_valid_title() is False  # type: ignore[arg-type]

    def test_year_lower_bound(self, input_file):
        """Test 1888 is the earliest accepted year."""
        from tvconvert.media import MediaItem

        assert MediaItem("Old", 1887, input_file).has_valid_year() is False
        assert MediaItem("Old", 1888, input_file).has_valid_year() is True

    def test_year_upper_bound(self, input_file):
        """Test the current year passes and the next one does not."""
        from tvconvert.media import MediaItem, current_year

        year = current_year()
        assert MediaItem("New", year, input_file).has_valid_year() is True
        assert MediaItem("New", year + 1, input_file).has_valid_year() is False

    def test_year_must_be_int(self, input_file):
        from tvconvert.media import MediaItem

        assert MediaItem("X", "1999", input_file).has_valid_year() is False  # type: ignore[arg-type]
        assert MediaItem("X", 1999.0, input_file).has_valid_year() is False  # type: ignore[arg-type]
        assert MediaItem("X", True, input_file).has_valid_year() is False  # type: ignore[arg-type]

    def test_missing_input_file(self, tmp_path):
        from tvconvert.media import MediaItem

        assert MediaItem("X", 1999, tmp_path / "missing.mkv").has_valid_input_file_path() is False

    def test_directory_is_not_an_input_file(self, tmp_path):
        from tvconvert.media import MediaItem

        assert MediaItem("X", 1999, tmp_path).has_valid_input_file_path() is False


class TestFromDict:
    """Tests for building items from configuration entries."""

    def test_from_dict(self, input_file):
        from tvconvert.media import MediaItem

        item = MediaItem.from_dict({"title": "The Matrix", "year": 1999, "inputFilePath": str(input_file)})
        assert item.title == "The Matrix"
        assert item.year == 1999
        assert item.input_file_path == input_file

    def test_from_dict_round_trip_keys(self, matrix):
        """Test to_dict uses the configuration key names."""
        data = matrix.to_dict()
        assert set(data) == {"title", "year", "inputFilePath"}

    def test_from_dict_missing_path(self):
        from tvconvert.media import MediaItem

        item = MediaItem.from_dict({"title": "X", "year": 1999})
        assert item.has_valid_input_file_path() is False

    def test_item_is_immutable(self, matrix):
        import dataclasses

        import pytest

        with pytest.raises(dataclasses.FrozenInstanceError):
            matrix.year = 2000
