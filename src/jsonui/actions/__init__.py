"""Declarative actions and their dispatch."""

from .models import Action, ConfirmSpec
from .registry import ActionRegistry, Handler
from .dispatcher import ActionDispatcher, ConfirmHook

__all__ = ["Action", "ConfirmSpec", "ActionRegistry", "Handler", "ActionDispatcher", "ConfirmHook"]
