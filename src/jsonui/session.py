"""
UI Session
Ties together data, validation, visibility, actions, streaming and export
for one rendered UI.
"""

from dataclasses import dataclass, field
from typing import Any, AsyncIterable, Iterable, Mapping

from .actions import ActionDispatcher, ActionRegistry, ConfirmHook, Handler
from .codegen import CodeGenerator, ExportOptions, GeneratedFile
from .core import LogContext, Settings, get_logger, get_settings, new_session_id
from .data import DataStore, ItemScope, get_in, join_path
from .data.binding import scoped_segments
from .streaming import Fragment, StreamingTreeBuilder
from .tree import Element, Tree
from .validation import Check, ValidationEngine
from .visibility import AuthState, VisibilityEvaluator

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedElement:
    """Element with bindings resolved against the current data model."""

    id: str
    type: str
    props: dict[str, Any]
    visible: bool
    component: Any | None
    children: list[tuple[str, ItemScope | None]] = field(default_factory=list)
    scope: ItemScope | None = None


class Session:
    """
    Isolated engine state for one UI.

    Every session owns its own DataStore, validation state and tree. The
    component mapping and action registry may be shared between sessions;
    they are only ever read.
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        components: Mapping[str, Any] | None = None,
        action_handlers: ActionRegistry | Mapping[str, Handler] | None = None,
        checks: Mapping[str, Check] | None = None,
        auth: AuthState | None = None,
        confirm: ConfirmHook | None = None,
        settings: Settings | None = None,
        generator: CodeGenerator | None = None,
    ) -> None:
        self.id = new_session_id()
        self.settings = settings or get_settings()
        self.components: Mapping[str, Any] = components if components is not None else {}
        self.store = DataStore(data)
        self.validation = ValidationEngine(self.store, checks)
        self.visibility = VisibilityEvaluator(auth)
        self.actions = ActionDispatcher(action_handlers, self.store, confirm)
        self.generator = generator or CodeGenerator(self.settings)
        self.tree = Tree()
        self.builder: StreamingTreeBuilder | None = None

        logger.debug("session_created", session_id=self.id)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def start_generation(self) -> StreamingTreeBuilder:
        """
        Begin a new generation, replacing the current tree.

        A generation still in progress is cancelled first.
        """
        if self.builder is not None and not self.builder.state.terminal:
            self.builder.cancel()
        self.builder = StreamingTreeBuilder(self.settings)
        self.tree = self.builder.tree
        logger.info("generation_started", session_id=self.id, generation_id=self.builder.generation_id)
        return self.builder

    async def generate(self, source: AsyncIterable[Fragment] | Iterable[Fragment]) -> Tree:
        """Stream `source` into a fresh tree and configure its input fields."""
        builder = self.start_generation()
        with LogContext(session_id=self.id, generation_id=builder.generation_id):
            tree = await builder.run(source)
        self.bind_fields()
        return tree

    def bind_fields(self) -> int:
        """
        Configure validation for every element carrying `valuePath` and `checks`.

        Returns:
            Number of fields configured
        """
        count = 0
        for element in self.tree.elements.values():
            path = element.props.get("valuePath")
            if isinstance(path, str) and element.props.get("checks"):
                self.validation.configure_from_props(path, element.props, self.settings.default_validate_on)
                count += 1
        return count

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def lookup_component(self, element_type: str) -> Any | None:
        """Component registered for `element_type`, or None for unknown types."""
        return self.components.get(element_type)

    def resolve(self, element_id: str, scope: ItemScope | None = None) -> ResolvedElement | None:
        """
        Resolve an element for rendering.

        Children of a repeated element are expanded once per item, each with
        its own item scope.

        Raises:
            InvalidPathError: A binding path is malformed
        """
        element = self.tree.get(element_id)
        if element is None:
            return None
        return ResolvedElement(
            id=element.id,
            type=element.type,
            props=self.store.resolve(element.props, scope),
            visible=self.visibility.evaluate(element.visible, self.store, scope),
            component=self.lookup_component(element.type),
            children=self._expand_children(element, scope),
            scope=scope,
        )

    def _expand_children(self, element: Element, scope: ItemScope | None) -> list[tuple[str, ItemScope | None]]:
        if element.repeat is None:
            return [(child, scope) for child in element.children]

        segments = scoped_segments(element.repeat.path, scope)
        items = get_in(self.store.model, segments) if segments is not None else None
        if not isinstance(items, list):
            return []
        items_path = join_path(segments)
        return [
            (child, ItemScope.of(items_path, index))
            for index in range(len(items))
            for child in element.children
        ]

    # ------------------------------------------------------------------
    # Actions and export
    # ------------------------------------------------------------------

    async def dispatch(self, action: Any) -> Any:
        """Dispatch an action through the session's dispatcher."""
        with LogContext(session_id=self.id):
            return await self.actions.dispatch(action)

    def export(self, options: ExportOptions | None = None) -> list[GeneratedFile]:
        """Export the current tree and data as a standalone project."""
        return self.generator.generate(self.tree, self.store.snapshot(), options)

    def close(self) -> None:
        if self.builder is not None:
            self.builder.cancel()
        self.validation.close()
        logger.debug("session_closed", session_id=self.id)


class SessionFactory:
    """Creates sessions sharing one set of registries and one export cache."""

    def __init__(
        self,
        settings: Settings,
        generator: CodeGenerator,
        actions: ActionRegistry,
        components: Mapping[str, Any] | None = None,
        checks: Mapping[str, Check] | None = None,
    ) -> None:
        self.settings = settings
        self.generator = generator
        self.actions = actions
        self.components = dict(components or {})
        self.checks = dict(checks or {})

    def create(
        self,
        data: Mapping[str, Any] | None = None,
        auth: AuthState | None = None,
        confirm: ConfirmHook | None = None,
    ) -> Session:
        return Session(
            data=data,
            components=self.components,
            action_handlers=self.actions,
            checks=self.checks,
            auth=auth,
            confirm=confirm,
            settings=self.settings,
            generator=self.generator,
        )


__all__ = ["ResolvedElement", "Session", "SessionFactory"]
