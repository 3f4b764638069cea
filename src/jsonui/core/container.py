"""Dependency Injection Container."""

from typing import Any, Mapping

from injector import Injector, Module, provider, singleton

from .config import Settings, get_settings
from ..actions import ActionRegistry, Handler
from ..codegen import CodeGenerator
from ..session import SessionFactory
from ..validation import Check


class CoreModule(Module):
    """Core dependencies."""

    def __init__(
        self,
        components: Mapping[str, Any] | None = None,
        action_handlers: Mapping[str, Handler] | None = None,
        checks: Mapping[str, Check] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.components = dict(components or {})
        self.action_handlers = dict(action_handlers or {})
        self.checks = dict(checks or {})
        self.settings = settings

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        """Provide engine settings."""
        return self.settings or get_settings()

    @singleton
    @provider
    def provide_action_registry(self) -> ActionRegistry:
        """Provide action registry singleton."""
        return ActionRegistry(self.action_handlers)

    @singleton
    @provider
    def provide_code_generator(self, settings: Settings) -> CodeGenerator:
        """Provide cached project generator."""
        return CodeGenerator(settings)

    @singleton
    @provider
    def provide_session_factory(
        self, settings: Settings, generator: CodeGenerator, actions: ActionRegistry
    ) -> SessionFactory:
        """Provide session factory sharing the registries."""
        return SessionFactory(
            settings=settings,
            generator=generator,
            actions=actions,
            components=self.components,
            checks=self.checks,
        )


def create_container(
    components: Mapping[str, Any] | None = None,
    action_handlers: Mapping[str, Handler] | None = None,
    checks: Mapping[str, Check] | None = None,
    settings: Settings | None = None,
) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(components, action_handlers, checks, settings)])
