"""Tests for visibility conditions."""

import pytest

from jsonui.data import ItemScope
from jsonui.visibility import AuthState, VisibilityEvaluator, is_visible


@pytest.fixture
def evaluator():
    return VisibilityEvaluator(AuthState(signed_in=True))


@pytest.mark.unit
@pytest.mark.parametrize(
    "condition,expected",
    [
        (None, True),
        (True, True),
        (False, False),
        ({"path": "analytics.revenue"}, True),
        ({"path": "form.email"}, False),
        ({"path": "missing"}, False),
        ({"auth": "signedIn"}, True),
        ({"auth": "signedOut"}, False),
        ({"not": {"path": "form.email"}}, True),
        ({"and": [{"path": "analytics.revenue"}, {"auth": "signedIn"}]}, True),
        ({"and": [{"path": "analytics.revenue"}, {"path": "missing"}]}, False),
        ({"or": [{"path": "missing"}, {"auth": "signedIn"}]}, True),
        ({"and": []}, True),
        ({"or": []}, False),
        ({"gt": [{"path": "analytics.revenue"}, 100000]}, True),
        ({"lte": [{"path": "analytics.growth"}, 0.1]}, False),
        ({"eq": [{"path": "users[0].name"}, "Ada"]}, True),
        ({"neq": [{"path": "users[0].name"}, "Ada"]}, False),
        ({"eq": [{"path": "missing"}, None]}, True),
    ],
)
def test_conditions(evaluator, store, condition, expected):
    assert evaluator.evaluate(condition, store) is expected


@pytest.mark.unit
@pytest.mark.parametrize(
    "condition",
    [
        {"unknown": 1},
        {"path": "a", "extra": 1},
        {"and": "not-a-list"},
        {"gt": [1]},
        {"gt": [{"path": "users[0].name"}, 3]},
        {"auth": "sometimes"},
        {"path": "a..b"},
        {"path": 42},
        "just a string",
    ],
)
def test_malformed_conditions_are_false(evaluator, store, condition):
    assert evaluator.evaluate(condition, store) is False


@pytest.mark.unit
def test_ordering_with_missing_operand_is_false(evaluator, store):
    assert evaluator.evaluate({"lt": [{"path": "missing"}, 5]}, store) is False
    assert evaluator.evaluate({"gte": [{"path": "missing"}, 5]}, store) is False


@pytest.mark.unit
def test_item_scope(evaluator, store):
    active = ItemScope.of("users", 0)
    inactive = ItemScope.of("users", 1)
    assert evaluator.evaluate({"path": "$item.active"}, store, active) is True
    assert evaluator.evaluate({"path": "$item.active"}, store, inactive) is False
    assert evaluator.evaluate({"eq": [{"path": "$index"}, 1]}, store, inactive) is True


@pytest.mark.unit
def test_signed_out_default(sample_data):
    assert is_visible({"auth": "signedOut"}, sample_data) is True
    assert is_visible({"auth": "signedIn"}, sample_data) is False


@pytest.mark.unit
def test_evaluation_is_pure(evaluator, store):
    before = store.snapshot()
    evaluator.evaluate({"and": [{"path": "users"}, {"not": {"path": "form"}}]}, store)
    assert store.snapshot() == before
