"""Pytest configuration and fixtures."""

import os
import re
from typing import Any

import pytest
from hypothesis import settings as hypothesis_settings

from jsonui.core import Settings, create_container
from jsonui.data import DataStore
from jsonui.tree import Element, Tree


# ============================================================================
# Pytest Hooks
# ============================================================================

# Property tests are not timing tests; avoid flaky DeadlineExceeded under load.
hypothesis_settings.register_profile("jsonui", deadline=None)
hypothesis_settings.load_profile("jsonui")


def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["JSONUI_LOG_LEVEL"] = "DEBUG"
    os.environ["JSONUI_EXPORT_CACHE_SIZE"] = "8"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings (not the cached process-wide instance)."""
    return Settings()


@pytest.fixture
def di_container(checks):
    """Dependency injection container for testing."""
    return create_container(
        components={"Card": object(), "Text": object()},
        action_handlers={"noop": lambda params: None},
        checks=checks,
    )


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def sample_data() -> dict[str, Any]:
    """Dashboard-style data model."""
    return {
        "analytics": {
            "revenue": 125000,
            "growth": 0.15,
            "salesByRegion": [
                {"label": "US", "value": 45000},
                {"label": "EU", "value": 35000},
            ],
        },
        "users": [
            {"id": "u1", "name": "Ada", "active": True},
            {"id": "u2", "name": "Linus", "active": False},
        ],
        "form": {"email": "", "region": ""},
    }


@pytest.fixture
def store(sample_data):
    """DataStore seeded with sample data."""
    return DataStore(sample_data)


@pytest.fixture
def checks():
    """Validation check catalog."""
    return {
        "required": lambda value, args: value not in (None, ""),
        "email": lambda value, args: bool(re.fullmatch(r"[^@\s]+@[^@\s]+\.[^@\s]+", value or "")),
        "minLength": lambda value, args: len(value or "") >= args.get("min", 0),
    }


# ============================================================================
# Tree Fixtures
# ============================================================================

@pytest.fixture
def sample_document() -> str:
    """Flat tree document as a model would stream it."""
    return (
        '{"root": "card", "elements": {'
        '"card": {"type": "Card", "props": {"title": "Revenue overview"}, "children": ["metric", "users"]},'
        '"metric": {"type": "Metric", "props": {"label": "Revenue", "valuePath": "analytics.revenue", "format": "currency"}},'
        '"users": {"type": "List", "props": {"dataPath": "users", "itemKey": "id"}, "children": ["user-name"]},'
        '"user-name": {"type": "Text", "props": {"content": {"path": "$item.name"}},'
        ' "visible": {"path": "$item.active"}}'
        "}}"
    )


@pytest.fixture
def sample_tree() -> Tree:
    """Small complete tree."""
    return Tree(
        root="card",
        elements={
            "card": Element(id="card", type="Card", props={"title": "Hello"}, children=["text"]),
            "text": Element(id="text", type="Text", props={"content": "World"}),
        },
    )
