"""Tests for path parsing and get/set."""

import copy

import pytest
from hypothesis import given, strategies as st

from jsonui.core import InvalidPathError
from jsonui.data.path import ABSENT, get, get_in, is_prefix, join_path, parse_path, set


@pytest.mark.unit
class TestParsePath:
    """Test path syntaxes."""

    def test_dotted(self):
        assert parse_path("a.b.c") == ("a", "b", "c")

    def test_indexes(self):
        assert parse_path("items[0].name") == ("items", 0, "name")
        assert parse_path("grid[1][2]") == ("grid", 1, 2)

    def test_quoted_keys(self):
        assert parse_path('a["key.with.dots"]') == ("a", "key.with.dots")
        assert parse_path("a['x']") == ("a", "x")

    def test_json_pointer(self):
        assert parse_path("/a/b/0/c") == ("a", "b", 0, "c")
        assert parse_path("/a~1b/c~0d") == ("a/b", "c~d")

    def test_empty_is_root(self):
        assert parse_path("") == ()

    @pytest.mark.parametrize("path", ["a..b", "a.", ".a", "a[", "a[x]", "a[0]b", "/a~2"])
    def test_malformed(self, path):
        with pytest.raises(InvalidPathError):
            parse_path(path)

    def test_invalid_path_is_value_error(self):
        with pytest.raises(ValueError):
            parse_path("a..b")


@pytest.mark.unit
class TestGet:
    """Test reads."""

    def test_nested(self):
        model = {"a": {"b": [{"c": 1}]}}
        assert get(model, "a.b[0].c") == 1
        assert get(model, "/a/b/0/c") == 1

    def test_missing_is_absent(self):
        model = {"a": {"b": 1}}
        assert get(model, "a.x") is ABSENT
        assert get(model, "a.b.c") is ABSENT
        assert get(model, "list[3]") is ABSENT

    def test_default(self):
        assert get({}, "x", default=None) is None

    def test_root(self):
        model = {"a": 1}
        assert get(model, "") is model

    def test_absent_is_falsy(self):
        assert not ABSENT
        assert copy.deepcopy(ABSENT) is ABSENT

    def test_get_in_with_segments(self):
        assert get_in({"a": [10, 20]}, ("a", 1)) == 20


@pytest.mark.unit
class TestSet:
    """Test writes."""

    def test_creates_intermediate_containers(self):
        model = set({}, "a.b[1].c", 5)
        assert model == {"a": {"b": [None, {"c": 5}]}}

    def test_overwrites_existing(self):
        model = {"a": {"b": 1}}
        set(model, "a.b", 2)
        assert model["a"]["b"] == 2

    def test_replaces_scalar_intermediate(self):
        model = {"a": 1}
        set(model, "a.b", 2)
        assert model == {"a": {"b": 2}}

    def test_replaces_list_in_the_way_of_a_key(self):
        model = {"a": [1]}
        set(model, "a.b", 2)
        assert model == {"a": {"b": 2}}

    def test_key_on_list_root(self):
        assert set([1, 2], "name", 3) == {"name": 3}

    def test_digit_key_indexes_list(self):
        model = {"a": [1, 2]}
        set(model, "a.1", 5)
        assert model == {"a": [1, 5]}

    def test_root_write_returns_value(self):
        assert set({"a": 1}, "", {"b": 2}) == {"b": 2}


@pytest.mark.unit
def test_join_path_round_trip():
    segments = ("a", 0, "key.with.dots", "b")
    assert parse_path(join_path(segments)) == segments


@pytest.mark.unit
def test_is_prefix():
    assert is_prefix("a.b", "a.b[0].c")
    assert is_prefix("", "anything")
    assert not is_prefix("a.bc", "a.b")
    assert is_prefix("/a/0", "a[0].x")


_keys = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=6)
_segments = st.lists(st.one_of(_keys, st.integers(min_value=0, max_value=4)), min_size=1, max_size=5)


@given(segments=_segments, value=st.one_of(st.integers(), st.text(max_size=10), st.booleans()))
def test_set_then_get_returns_value(segments, value):
    """Writing a value makes it readable at the same path."""
    path = join_path(segments)
    model = set({}, path, value) if isinstance(segments[0], str) else set([], path, value)
    assert get(model, path) == value


@pytest.mark.unit
def test_count_scenario():
    model = {"count": 3}
    assert get(model, "count") == 3
    model = set(model, "count", 5)
    assert get(model, "count") == 5


_values = st.one_of(st.integers(), st.text(max_size=10), st.booleans())


@given(first=_segments, second=_segments, value=_values)
def test_set_over_existing_shape_returns_value(first, second, value):
    """A write is readable whatever shape earlier writes left behind."""
    model = set({}, join_path(first), 1)
    path = join_path(second)
    model = set(model, path, value)
    assert get(model, path) == value
