"""Tests for IF condition evaluation."""

import pytest

from music_sorter.models.track import TrackMetadata
from music_sorter.script.conditions import evaluate_condition, is_integer


@pytest.fixture
def metadata():
    return TrackMetadata(
        artist="Daft Punk",
        album="Discovery",
        year=2001,
        genre="House",
        custom={"BPM": "123", "KEY": "A minor", "RATING": "4.5", "OFFSET": "-3"},
    )


class TestIsNumber:
    """Test the ``is number`` operator."""

    def test_numeric_tag(self, metadata):
        assert evaluate_condition("YEAR is number", metadata)
        assert evaluate_condition("CUSTOM:BPM is number", metadata)

    def test_absent_tag(self):
        assert not evaluate_condition("YEAR is number", TrackMetadata())

    def test_text_tag(self, metadata):
        assert not evaluate_condition("ARTIST is number", metadata)
        assert not evaluate_condition("CUSTOM:KEY is number", metadata)

    def test_decimal_is_not_number(self, metadata):
        assert not evaluate_condition("CUSTOM:RATING is number", metadata)

    def test_negative_number(self, metadata):
        assert evaluate_condition("CUSTOM:OFFSET is number", metadata)

    @pytest.mark.parametrize("value,expected", [
        ("2001", True),
        ("-7", True),
        ("007", True),
        ("+7", False),
        (" 7", False),
        ("7.0", False),
        ("-", False),
        ("", False),
        ("1e3", False),
    ])
    def test_is_integer(self, value, expected):
        assert is_integer(value) is expected


class TestComparisons:
    """Test ``==`` and ``!=``."""

    def test_equal(self, metadata):
        assert evaluate_condition('GENRE == "House"', metadata)
        assert evaluate_condition("GENRE==House", metadata)
        assert not evaluate_condition('GENRE == "Techno"', metadata)

    def test_not_equal(self, metadata):
        assert evaluate_condition('GENRE != "Techno"', metadata)
        assert not evaluate_condition("GENRE != House", metadata)

    def test_not_equal_takes_precedence(self, metadata):
        """Test that ``!=`` is never read as ``==`` or a bare tag."""
        assert not evaluate_condition("YEAR!=2001", metadata)
        assert evaluate_condition("YEAR!=2020", metadata)

    def test_comparison_is_case_sensitive(self, metadata):
        assert not evaluate_condition('GENRE == "house"', metadata)

    def test_compare_to_empty(self, metadata):
        """Test comparing absent tags with the empty string."""
        assert evaluate_condition('COMPOSER == ""', metadata)
        assert evaluate_condition('GENRE != ""', metadata)

    def test_only_matching_quotes_stripped(self, metadata):
        assert not evaluate_condition('GENRE == "House', metadata)
        assert evaluate_condition('CUSTOM:KEY == "A minor"', metadata)

    def test_split_once(self):
        """Test that only the first operator splits the condition."""
        metadata = TrackMetadata(title="a==b")

        assert evaluate_condition('TITLE == "a==b"', metadata)


class TestExistence:
    """Test bare tag conditions."""

    def test_present(self, metadata):
        assert evaluate_condition("ARTIST", metadata)
        assert evaluate_condition("  album  ", metadata)

    def test_absent(self, metadata):
        assert not evaluate_condition("COMPOSER", metadata)
        assert not evaluate_condition("NOT_A_TAG", metadata)

    def test_is_number_checked_first(self):
        """Test that ``is number`` wins over comparisons."""
        metadata = TrackMetadata(custom={"A": "5"})

        assert evaluate_condition("CUSTOM:A is number == x", metadata)
