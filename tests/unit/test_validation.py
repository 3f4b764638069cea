"""Tests for the validation engine."""

import pytest

from jsonui.core import InvalidPathError
from jsonui.data import DataStore
from jsonui.validation import FieldStatus, ValidateOn, ValidationEngine, ValidationRule


EMAIL_RULES = [
    {"fn": "required", "message": "Email is required"},
    {"fn": "email", "message": "Enter a valid email"},
]


@pytest.fixture
def engine(store, checks):
    """Validation engine over the sample store."""
    return ValidationEngine(store, checks)


@pytest.mark.unit
def test_rule_accepts_fn_alias():
    rule = ValidationRule.model_validate({"fn": "required", "message": "Required"})
    assert rule.check == "required"
    assert ValidationRule(check="email", message="Bad").check == "email"


@pytest.mark.unit
def test_required_on_blur(engine, store):
    """Blur on an empty required field reports errors; fixing and blurring again clears them."""
    engine.configure("form.email", EMAIL_RULES, ValidateOn.BLUR)
    assert engine.status("form.email") is FieldStatus.UNTOUCHED

    errors = engine.handle_event("form.email", "blur")

    assert errors == ["Email is required", "Enter a valid email"]
    state = engine.state("form.email")
    assert state.touched
    assert engine.status("form.email") is FieldStatus.INVALID

    store.set("form.email", "ada@example.com")
    assert engine.errors("form.email") == ["Email is required", "Enter a valid email"]

    assert engine.handle_event("form.email", "blur") == []
    assert engine.status("form.email") is FieldStatus.VALID


@pytest.mark.unit
def test_change_policy_revalidates_on_write(engine, store):
    engine.configure("form.email", EMAIL_RULES, "change")
    store.set("form.email", "not-an-email")
    assert engine.errors("form.email") == ["Enter a valid email"]

    store.set("form.email", "ok@example.com")
    assert engine.errors("form.email") == []


@pytest.mark.unit
def test_change_event_ignored_for_blur_policy(engine):
    engine.configure("form.email", EMAIL_RULES, "blur")
    assert engine.handle_event("form.email", "change") is None
    assert engine.status("form.email") is FieldStatus.UNTOUCHED


@pytest.mark.unit
def test_rule_args_are_passed(engine, store):
    engine.configure("form.region", [{"check": "minLength", "message": "Too short", "args": {"min": 3}}])
    store.set("form.region", "EU")
    assert engine.validate("form.region") == ["Too short"]


@pytest.mark.unit
def test_unknown_check_is_skipped(engine):
    engine.configure("form.email", [{"fn": "doesNotExist", "message": "never"}])
    assert engine.validate("form.email") == []


@pytest.mark.unit
def test_submit_validates_every_field(engine, store):
    engine.configure("form.email", EMAIL_RULES, "submit")
    engine.configure("form.region", [{"fn": "required", "message": "Pick a region"}], "submit")

    assert engine.submit() is False
    assert engine.errors("form.region") == ["Pick a region"]
    assert engine.state("form.region").touched

    store.update({"form.email": "a@b.co", "form.region": "EU"})
    assert engine.submit() is True
    assert engine.is_valid


@pytest.mark.unit
def test_configure_from_props(engine):
    props = {"valuePath": "form.email", "checks": EMAIL_RULES, "validateOn": "change"}
    config = engine.configure_from_props("form.email", props)
    assert config.validate_on is ValidateOn.CHANGE
    assert [rule.check for rule in config.rules] == ["required", "email"]


@pytest.mark.unit
def test_validation_never_blocks_writes(engine, store):
    engine.configure("form.email", EMAIL_RULES, "change")
    store.set("form.email", "bad")
    assert store.get("form.email") == "bad"


@pytest.mark.unit
def test_raising_check_counts_as_failure(store):
    engine = ValidationEngine(store, {"minLength": lambda value, args: len(value) >= 2})
    engine.configure("form.name", [{"fn": "minLength", "message": "Too short"}], "change")

    store.set("form.name", None)

    assert store.get("form.name") is None
    assert engine.errors("form.name") == ["Too short"]
    store.set("form.name", "Ada")
    assert engine.errors("form.name") == []


@pytest.mark.unit
def test_reset(engine):
    engine.configure("form.email", EMAIL_RULES)
    engine.validate("form.email")
    engine.reset("form.email")
    assert engine.status("form.email") is FieldStatus.UNTOUCHED


@pytest.mark.unit
def test_close_drops_subscriptions(checks):
    store = DataStore({"x": ""})
    engine = ValidationEngine(store, checks)
    engine.configure("x", [{"fn": "required", "message": "Required"}], "change")
    engine.close()
    store.set("x", "")
    assert engine.status("x") is FieldStatus.UNTOUCHED


@pytest.mark.unit
def test_configure_malformed_path(engine):
    with pytest.raises(InvalidPathError):
        engine.configure("form..email", EMAIL_RULES)


@pytest.mark.unit
def test_touch_then_validate(checks):
    store = DataStore({"email": ""})
    engine = ValidationEngine(store, checks)
    engine.configure("email", [{"fn": "required", "message": "Required"}], "blur")

    engine.touch("email")
    assert engine.status("email") is FieldStatus.TOUCHED
    assert engine.validate("email") == ["Required"]

    store.set("email", "ada@example.com")
    assert engine.validate("email") == []
    assert engine.validate("email") == []


@pytest.mark.unit
def test_register_check(engine, store):
    engine.register_check("upper", lambda value, args: value == (value or "").upper())
    engine.configure("form.region", [{"fn": "upper", "message": "Use capitals"}])
    store.set("form.region", "eu")
    assert engine.validate("form.region") == ["Use capitals"]
