"""Per-session orchestration of keys, motions, search and tree traversal.

A ``NavigationSession`` owns exactly one keybinding engine, one search cache
and the current tree node. Consumers subscribe to its events (``keypress``,
``keybinding``, ``highlight``, ``scroll``, ``cd``, ``select``, ``search``,
``close``) and may call ``prevent_default`` on an event to suppress the
built-in behaviour that would follow it.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from .config import DEFAULT_WINDOW_HEIGHT
from .input.bindings import BindingTable, default_binding_table
from .input.engine import Command, KeybindingEngine
from .input.keypress import Keypress, canonicalize
from .input.registry import ActionBinding, ActionRegistry
from .navigation.viewport import (
    ALIGN_MOTIONS,
    ROW_MOTIONS,
    Bounds,
    Motion,
    navigate,
    scroll_position,
    visible_bounds,
)
from .search import NOT_FOUND, Searcher, ignore_case_match, item_text, substring_match
from .tree import TreeNode

logger = logging.getLogger(__name__)

Listener = Callable[["Event"], None]

CHILD_VIEW_SCROLL_ACTIONS = (
    "scroll-child-view-up",
    "scroll-child-view-down",
    "scroll-child-view-up-fast",
    "scroll-child-view-down-fast",
)


class Event:
    """A named notification whose default behaviour listeners may cancel."""

    def __init__(self, name: str, **data: Any) -> None:
        self.name = name
        self.data = data
        self._default_prevented = False

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def prevent_default(self) -> None:
        self._default_prevented = True

    @property
    def default_prevented(self) -> bool:
        return self._default_prevented


class NavigationSession:
    """Drive vi navigation over a ``TreeNode`` hierarchy from raw keystrokes."""

    def __init__(
        self,
        root: TreeNode,
        *,
        window_height: int = DEFAULT_WINDOW_HEIGHT,
        table: BindingTable | None = None,
        ignore_case: bool = False,
    ) -> None:
        self.root = root
        self.current_node = root
        self.window_height = max(1, window_height)
        self._ignore_case = ignore_case
        self.engine = KeybindingEngine(table if table is not None else default_binding_table())
        self.searcher = Searcher()
        self.last_search_query: str | None = None
        self.last_search_direction = 1
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)
        self._actions = ActionRegistry().register_bindings(
            ActionBinding(tuple(ROW_MOTIONS) + tuple(ALIGN_MOTIONS), self._motion_action),
            ActionBinding(("cursor-left",), self._parent_action),
            ActionBinding(("cursor-right", "enter"), self._child_action),
            ActionBinding(("search-next", "search-previous"), self._repeat_search_action),
            ActionBinding(("find",), self._find_action),
            ActionBinding(CHILD_VIEW_SCROLL_ACTIONS, self._child_view_scroll_action),
        )

    @property
    def ignore_case(self) -> bool:
        return self._ignore_case

    @ignore_case.setter
    def ignore_case(self, value: bool) -> None:
        # Cached matches were computed with the old predicate.
        if bool(value) != self._ignore_case:
            self.searcher.clear_cache()
        self._ignore_case = bool(value)

    # ---- events ----

    def on(self, name: str, listener: Listener) -> Listener:
        self._listeners[name].append(listener)
        return listener

    def off(self, name: str, listener: Listener) -> None:
        listeners = self._listeners.get(name)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def emit(self, name: str, **data: Any) -> Event:
        """Notify listeners of ``name`` in subscription order and return the event."""
        event = Event(name, **data)
        for listener in list(self._listeners.get(name, ())):
            listener(event)
        return event

    # ---- input ----

    @property
    def pending_input(self) -> str:
        return self.engine.pending_input

    def install_bindings(self, table: BindingTable) -> None:
        self.engine.install(table)

    def handle_keypress(self, keypress: Keypress) -> Command | None:
        """Canonicalize and handle one decoded keystroke."""
        token = canonicalize(keypress)
        event = self.emit("keypress", keypress=keypress, token=token)
        if event.default_prevented:
            return None
        return self._resolve(token)

    def handle_token(self, token: str) -> Command | None:
        """Handle one canonical token; returns the command it completed, if any."""
        event = self.emit("keypress", keypress=None, token=token)
        if event.default_prevented:
            return None
        return self._resolve(token)

    def _resolve(self, token: str) -> Command | None:
        command = self.engine.handle_token(token)
        if command is None:
            return None
        event = self.emit("keybinding", command=command)
        if event.default_prevented:
            return command
        if self._actions.handles(command.action):
            self._actions.dispatch(command)
        else:
            logger.debug("no built-in behaviour for %r", command.action)
        return command

    # ---- viewport ----

    def set_window_height(self, rows: int) -> None:
        self.window_height = max(1, rows)
        node = self.current_node
        node.scroll_pos_y = min(node.scroll_pos_y, self.max_scroll_row())

    def page_height(self) -> int:
        """Last valid child index of the current node."""
        return len(self.current_node.children) - 1

    def max_scroll_row(self) -> int:
        """Scroll row that shows the last full window of the current node."""
        return max(0, self.page_height() - self.window_height + 1)

    def viewport_bounds(self) -> Bounds:
        return visible_bounds(self.current_node.scroll_pos_y, self.window_height, self.page_height())

    def _apply_motion(self, motion: Motion) -> bool:
        node = self.current_node
        scrolled = False
        if motion.scrolls:
            scroll_row = min(motion.scroll_row, self.max_scroll_row())
            if scroll_row != node.scroll_pos_y:
                node.scroll_pos_y = scroll_row
                scrolled = True
        highlighted = node.set_active_child(motion.cursor_row)
        if scrolled:
            self.emit("scroll", node=node, scroll_row=node.scroll_pos_y)
        if highlighted:
            self.emit("highlight", item=node.get_active_child())
        return highlighted or scrolled

    def jump_to(self, index: int) -> bool:
        """Highlight child ``index`` of the current node, scrolling as vi would."""
        node = self.current_node
        if not node.has_children():
            return False
        index = max(0, min(index, self.page_height()))
        motion = Motion(index, scroll_position(index, self.viewport_bounds(), node.active_idx))
        return self._apply_motion(motion)

    def _motion_action(self, command: Command) -> bool:
        node = self.current_node
        if not node.has_children():
            return False
        motion = navigate(
            command.action,
            command.count,
            self.page_height(),
            self.viewport_bounds(),
            node.active_idx,
        )
        return self._apply_motion(motion)

    # ---- tree traversal ----

    def cd(self, node: TreeNode | None) -> bool:
        """Make ``node`` the current node; childless nodes cannot be entered."""
        if node is None or not node.has_children():
            return False
        self.current_node = node
        logger.debug("cd into %r", node)
        self.emit("cd", item=node, path=node.path())
        self.emit("highlight", item=node.get_active_child())
        return True

    def _parent_action(self, command: Command) -> bool:
        target = self.current_node
        for _ in range(command.count):
            parent = target.parent
            if parent is None:
                break
            parent.set_active_child(target)
            target = parent
        if target is self.current_node:
            return False
        return self.cd(target)

    def _child_action(self, command: Command) -> bool:
        child = self.current_node.get_active_child()
        if child is None:
            return False
        if child.has_children():
            return self.cd(child)
        self.emit("select", item=child)
        return False

    def _child_view_scroll_action(self, command: Command) -> bool:
        child = self.current_node.get_active_child()
        if child is None or not child.has_children():
            return False
        step = self.window_height // 2 if command.action.endswith("-fast") else 1
        direction = -1 if "-up" in command.action else 1
        limit = max(0, len(child.children) - self.window_height)
        scroll_row = max(0, min(limit, child.scroll_pos_y + direction * step * command.count))
        if scroll_row == child.scroll_pos_y:
            return False
        child.scroll_pos_y = scroll_row
        self.emit("scroll", node=child, scroll_row=scroll_row)
        return True

    # ---- search ----

    def _search_test(self, item: Any, query: str, index: int) -> bool:
        if self.ignore_case:
            return ignore_case_match(item, query, index)
        return substring_match(item, query, index)

    def invalidate_search(self, query: str | None = None) -> None:
        """Forget cached matches after the current children changed in place."""
        self.searcher.clear_cache(query)

    def search(self, query: str, count: int = 1) -> int:
        """Search the current node's children and highlight the match.

        The sign of ``count`` sets the direction later ``n``/``N`` presses are
        relative to. Returns the matched index or ``NOT_FOUND``.
        """
        self.last_search_direction = 1 if count > 0 else -1
        return self._search(query, count)

    def _search(self, query: str, count: int) -> int:
        node = self.current_node
        index = self.searcher.search(
            node.children,
            query,
            test=self._search_test,
            start_index=node.active_idx,
            count=count,
            use_cache=True,
        )
        self.last_search_query = query
        logger.debug("search %r (count %d) -> %d", query, count, index)
        self.emit("search", query=query, index=index)
        if index != NOT_FOUND:
            self.jump_to(index)
        return index

    def _repeat_search_action(self, command: Command) -> bool:
        if not self.last_search_query:
            return False
        direction = 1 if command.action == "search-next" else -1
        index = self._search(self.last_search_query, command.count * direction * self.last_search_direction)
        return index != NOT_FOUND

    def _find_action(self, command: Command) -> bool:
        char = command.read_result
        if not isinstance(char, str) or not char:
            return False
        node = self.current_node

        def starts_with(item: Any, query: str, index: int) -> bool:
            text = item_text(item)
            if self.ignore_case:
                return text.casefold().startswith(query.casefold())
            return text.startswith(query)

        index = self.searcher.search(
            node.children,
            char,
            test=starts_with,
            start_index=node.active_idx,
            count=command.count,
        )
        if index == NOT_FOUND:
            return False
        return self.jump_to(index)

    def close(self) -> None:
        """Emit ``close`` and drop all per-session state."""
        self.emit("close")
        self.engine.reset()
        self.searcher.clear_cache()
        self._listeners.clear()
