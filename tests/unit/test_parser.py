"""Tests for the partial JSON parser."""

import pytest
from hypothesis import given, settings, strategies as st

from jsonui.core import StreamParseError
from jsonui.core.json import safe_json_dumps
from jsonui.streaming import PartialJSONParser


def parse(text: str, **kwargs) -> PartialJSONParser:
    parser = PartialJSONParser(**kwargs)
    parser.feed(text)
    return parser


@pytest.mark.unit
class TestSnapshots:
    """Test speculative snapshots."""

    def test_empty_parser(self):
        snapshot = PartialJSONParser().snapshot()
        assert snapshot.value is None
        assert not snapshot.complete

    def test_partial_string(self):
        snapshot = parse('{"a": {"title": "Hel').snapshot()
        assert snapshot.value == {"a": {"title": "Hel"}}
        assert snapshot.partial_path == ("a", "title")
        assert snapshot.open_paths == frozenset({(), ("a",)})

    def test_partial_string_in_array(self):
        snapshot = parse('{"items": ["one", "tw').snapshot()
        assert snapshot.value == {"items": ["one", "tw"]}
        assert snapshot.partial_path == ("items", 1)

    def test_partial_number_uses_longest_valid_prefix(self):
        assert parse('{"n": 12').snapshot().value == {"n": 12}
        assert parse('{"n": 1.').snapshot().value == {"n": 1}
        assert parse('{"n": 1.5e').snapshot().value == {"n": 1.5}

    def test_bare_minus_and_partial_literal_are_not_placed(self):
        assert parse('{"n": -').snapshot().value == {}
        assert parse('{"ok": tr').snapshot().value == {}

    def test_pending_key_not_exposed(self):
        snapshot = parse('{"done": 1, "ti').snapshot()
        assert snapshot.value == {"done": 1}
        assert snapshot.partial_path is None

    def test_snapshot_is_a_copy(self):
        parser = parse('{"a": [1')
        parser.snapshot().value["a"].append(99)
        assert parser.snapshot().value == {"a": [1]}


@pytest.mark.unit
class TestDocuments:
    """Test complete documents."""

    def test_complete_document(self):
        parser = parse('{"a": [1, -2.5, true, false, null, {"b": "c"}], "e": 1e3}')
        assert parser.complete
        assert parser.close() == {"a": [1, -2.5, True, False, None, {"b": "c"}], "e": 1000.0}

    def test_preamble_and_trailer_ignored(self):
        parser = parse('Sure! ```json\n{"a": 1}\n``` hope that helps {')
        assert parser.close() == {"a": 1}

    def test_escapes(self):
        parser = parse(r'{"s": "line\nbreak \"quoted\" \u00e9 \ud83d\ude00 \/"}')
        assert parser.close() == {"s": 'line\nbreak "quoted" \u00e9 \U0001F600 /'}

    def test_lone_surrogate_becomes_replacement(self):
        assert parse(r'{"s": "\ud83d!"}').close() == {"s": "\ufffd!"}
        assert parse(r'{"s": "\ude00"}').close() == {"s": "\ufffd"}

    def test_close_incomplete_raises(self):
        with pytest.raises(StreamParseError, match="Unexpected end"):
            parse('{"a": 1').close()

    @given(st.dictionaries(st.text(max_size=8), st.one_of(st.integers(), st.text(max_size=8), st.booleans())))
    @settings(max_examples=50)
    def test_any_split_point(self, value):
        text = safe_json_dumps(value)
        for split in range(len(text) + 1):
            parser = PartialJSONParser()
            parser.feed(text[:split])
            parser.feed(text[split:])
            assert parser.close() == value


@pytest.mark.unit
@pytest.mark.parametrize(
    "text",
    [
        '{"a": 1,}',
        '{"a": [1, 2,]}',
        '{"a" 1}',
        "{'a': 1}",
        '{"a": 01}',
        '{"a": tru}',
        '{"a": "\\x"}',
        '{"a": "\u0001"}',
        '{"a": 1 "b": 2}',
    ],
)
def test_malformed_json_raises(text):
    with pytest.raises(StreamParseError) as exc:
        parse(text)
    assert exc.value.position is not None


@pytest.mark.unit
def test_depth_limit():
    with pytest.raises(StreamParseError, match="depth"):
        parse('{"a": {"b": {"c": {}}}}', max_depth=3)
    assert parse('{"a": {"b": {}}}', max_depth=3).complete


@pytest.mark.unit
def test_size_limit():
    with pytest.raises(StreamParseError, match="maximum size"):
        parse("{" + '"k": "' + "x" * 50 + '"}', max_size=20)


@pytest.mark.unit
def test_size_counts_from_root():
    parser = parse("x" * 100 + '{"a": 1}', max_size=10)
    assert parser.complete
    assert parser.position == 108
