"""Action-name dispatch for resolved commands.

Keys never reach this layer: the engine has already turned them into a
``Command`` and handlers are looked up by its action name only.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .engine import Command

ActionHandler = Callable[[Command], "bool | None"]


@dataclass(frozen=True)
class ActionBinding:
    """One handler serving a group of related actions."""

    actions: tuple[str, ...]
    handler: ActionHandler


class ActionRegistry:
    """Route commands to handlers; an action has at most one handler."""

    def __init__(self) -> None:
        self._handlers: dict[str, ActionHandler] = {}

    def register_binding(self, binding: ActionBinding) -> ActionRegistry:
        """Attach ``binding.handler`` to each of its actions.

        Raises ``ValueError`` when an action already has a handler.
        """
        taken = [action for action in binding.actions if action in self._handlers]
        if taken:
            raise ValueError(f"actions already have handlers: {', '.join(taken)}")
        for action in binding.actions:
            self._handlers[action] = binding.handler
        return self

    def register_bindings(self, *bindings: ActionBinding) -> ActionRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def handles(self, action: str) -> bool:
        return action in self._handlers

    def dispatch(self, command: Command) -> bool | None:
        """Run the handler for ``command.action``; ``None`` when nothing handles it."""
        handler = self._handlers.get(command.action)
        if handler is None:
            return None
        return handler(command)
