"""Tests for sessions and the DI container."""

import pytest

from jsonui.actions import ActionRegistry
from jsonui.codegen import CodeGenerator
from jsonui.core import Settings, UnknownActionError
from jsonui.data import ItemScope
from jsonui.session import Session, SessionFactory
from jsonui.streaming import StreamState
from jsonui.validation import FieldStatus
from jsonui.visibility import AuthState


FORM_DOCUMENT = (
    '{"root": "form", "elements": {'
    '"form": {"type": "Stack", "children": ["email", "submit"]},'
    '"email": {"type": "TextField", "props": {"label": "Email", "valuePath": "form.email",'
    ' "checks": [{"fn": "required", "message": "Email is required"}]}},'
    '"submit": {"type": "Button", "props": {"label": "Send", "action": "submit"},'
    ' "visible": {"auth": "signedIn"}}'
    "}}"
)


def chunks(text: str, size: int = 9) -> list[str]:
    return [text[i:i + size] for i in range(0, len(text), size)]


@pytest.fixture
def session(sample_data, checks, settings):
    components = {"Card": "CardComponent", "Text": "TextComponent", "List": "ListComponent"}
    session = Session(
        data=sample_data,
        components=components,
        action_handlers={"submit": lambda params: params},
        checks=checks,
        auth=AuthState(signed_in=True),
        settings=settings,
    )
    yield session
    session.close()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generate_streams_tree(session, sample_document):
    tree = await session.generate(chunks(sample_document))

    assert tree is session.tree
    assert tree.frozen
    assert session.builder.state is StreamState.COMPLETE
    assert set(tree.elements) == {"card", "metric", "users", "user-name"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resolve_expands_repeat_scopes(session, sample_document):
    await session.generate(chunks(sample_document))

    users = session.resolve("users")
    assert users.component == "ListComponent"
    assert users.children == [
        ("user-name", ItemScope.of("users", 0)),
        ("user-name", ItemScope.of("users", 1)),
    ]

    first = session.resolve(*users.children[0])
    second = session.resolve(*users.children[1])
    assert first.props == {"content": "Ada"}
    assert first.visible is True
    assert second.props == {"content": "Linus"}
    assert second.visible is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resolve_unknown_component_and_missing_element(session, sample_document):
    await session.generate(chunks(sample_document))

    metric = session.resolve("metric")
    assert metric.component is None
    assert metric.type == "Metric"
    assert session.resolve("ghost") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_repeat_over_non_list_has_no_children(session, sample_document):
    await session.generate(chunks(sample_document))
    session.store.set("users", "not a list")
    assert session.resolve("users").children == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_generate_binds_fields(session):
    await session.generate(chunks(FORM_DOCUMENT))

    assert session.validation.status("form.email") is FieldStatus.UNTOUCHED
    assert session.validation.handle_event("form.email", "blur") == ["Email is required"]
    assert session.resolve("submit").visible is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_new_generation_replaces_tree(session, sample_document):
    builder = session.start_generation()
    builder.feed(sample_document[:40])

    await session.generate(chunks(FORM_DOCUMENT))

    assert builder.state is StreamState.CANCELLED
    assert "form" in session.tree
    assert "card" not in session.tree


@pytest.mark.unit
@pytest.mark.asyncio
async def test_dispatch(session):
    assert await session.dispatch({"name": "submit", "params": {"email": {"path": "users[0].name"}}}) == {
        "email": "Ada"
    }
    with pytest.raises(UnknownActionError):
        await session.dispatch("missing")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_export_uses_current_data(session, sample_document):
    await session.generate(chunks(sample_document))
    session.store.set("analytics.revenue", 1)

    files = {f.path: f.content for f in session.export()}

    assert '"revenue": 1,' in files["lib/data.ts"]
    assert "components/ui/List.tsx" in files


@pytest.mark.unit
def test_sessions_are_isolated(sample_data):
    factory = SessionFactory(
        settings=Settings(),
        generator=CodeGenerator(Settings()),
        actions=ActionRegistry(),
    )
    first = factory.create(sample_data)
    second = factory.create(sample_data)

    first.store.set("form.email", "a@b.co")

    assert second.store.get("form.email") == ""
    assert first.id != second.id
    assert first.generator is second.generator


@pytest.mark.unit
@pytest.mark.asyncio
async def test_container_provides_factory(di_container, sample_data):
    factory = di_container.get(SessionFactory)
    assert factory is di_container.get(SessionFactory)
    assert factory.generator is di_container.get(CodeGenerator)

    session = factory.create(sample_data)
    assert session.lookup_component("Card") is not None
    assert session.lookup_component("Chart") is None
    assert await session.dispatch("noop") is None
