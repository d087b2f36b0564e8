"""Tests for path mappers."""

import pytest

from castore.errors import ConfigurationError
from castore.mappers import DepthMapper, FlatMapper, make_mapper


class TestFlatMapper:
    """Test the flat layout."""

    def test_flat_returns_no_segments(self):
        assert FlatMapper()("abcdef") == []

    def test_flat_accepts_any_key(self):
        assert FlatMapper()("") == []
        assert FlatMapper()("x") == []


class TestDepthMapper:
    """Test the depth-bucketed layout."""

    def test_depth_one(self):
        d1 = DepthMapper(1)
        assert d1("abcdef") == ["ab"]
        assert d1("ab") == ["ab"]

    def test_depth_two(self):
        d2 = DepthMapper(2)
        assert d2("abcdef") == ["ab", "cd"]
        assert d2("abcd") == ["ab", "cd"]

    def test_depth_three_full_key(self):
        key = "c3ab8ff13720e8ad9047dd39466b3c8974e592c2fa383d4a3960714caef0c4f2"
        assert DepthMapper(3)(key) == ["c3", "ab", "8f"]

    @pytest.mark.parametrize("depth,key", [(1, "a"), (1, ""), (2, "abc"), (3, "abcde")])
    def test_short_key_fails(self, depth, key):
        """Keys shorter than 2 * depth are rejected."""
        with pytest.raises(ValueError, match="too short"):
            DepthMapper(depth)(key)

    @pytest.mark.parametrize("depth", [0, -1, True, 1.5, "2"])
    def test_invalid_depth(self, depth):
        with pytest.raises(ValueError, match="positive integer"):
            DepthMapper(depth)

    def test_deterministic(self):
        """Same key always maps to the same segments."""
        mapper = DepthMapper(2)
        key = "0123456789abcdef"
        assert mapper(key) == mapper(key) == DepthMapper(2)(key)

    def test_equality(self):
        assert DepthMapper(2) == DepthMapper(2)
        assert DepthMapper(2) != DepthMapper(3)
        assert FlatMapper() == FlatMapper()
        assert FlatMapper() != DepthMapper(1)


class TestMakeMapper:
    """Test building mappers from configuration values."""

    def test_flat(self):
        assert make_mapper("flat") == FlatMapper()

    def test_depth(self):
        assert make_mapper("depth", 3) == DepthMapper(3)

    def test_case_and_whitespace(self):
        assert make_mapper(" Depth ", 1) == DepthMapper(1)

    def test_empty_layout_is_flat(self):
        assert make_mapper("") == FlatMapper()

    def test_unknown_layout(self):
        with pytest.raises(ConfigurationError, match="Unknown layout"):
            make_mapper("sharded")

    def test_bad_depth(self):
        with pytest.raises(ConfigurationError, match="positive integer"):
            make_mapper("depth", 0)
