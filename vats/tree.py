"""Hierarchical item tree navigated by vats sessions.

Each node owns its ordered children and keeps a weak back-reference to its
parent. The active (highlighted) child index is always clamped into range;
out-of-range indices are never an error.
"""

from __future__ import annotations

import weakref
from collections.abc import Iterator
from typing import Any

NO_ACTIVE_CHILD = -1


class TreeNode:
    """One node in a navigable tree.

    ``data`` is free-form consumer payload; ``data["name"]`` is used as the
    node's label when present.
    """

    def __init__(self, data: dict[str, Any] | None = None, children: list[TreeNode] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})
        self.children: list[TreeNode] = []
        self._parent_ref: weakref.ReferenceType[TreeNode] | None = None
        self.active_idx = NO_ACTIVE_CHILD
        self.previous_active_idx = NO_ACTIVE_CHILD
        self.scroll_pos_y = 0
        for child in children or ():
            self.add_child(child)

    def __repr__(self) -> str:
        return f"TreeNode({self.name()!r}, children={len(self.children)})"

    @property
    def parent(self) -> TreeNode | None:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def _attach(self, node: TreeNode) -> None:
        current = node.parent
        if current is not None and current is not self:
            current.remove_child(node)
        node._parent_ref = weakref.ref(self)

    def _index_of(self, node_or_index: TreeNode | int) -> int:
        if isinstance(node_or_index, TreeNode):
            for idx, child in enumerate(self.children):
                if child is node_or_index:
                    return idx
            return -1
        return node_or_index

    def _constrain_idx(self, idx: int) -> int:
        if not self.children:
            return NO_ACTIVE_CHILD
        return max(0, min(idx, len(self.children) - 1))

    def add_child(self, node: TreeNode, index: int | None = None) -> TreeNode:
        """Insert ``node`` at ``index`` (clamped; default: append) and adopt it."""
        if node is self or any(ancestor is node for ancestor in self.ancestors()):
            raise ValueError("cannot add a node beneath itself")
        self._attach(node)
        if any(child is node for child in self.children):
            self.children.remove(node)
        if index is None:
            self.children.append(node)
        else:
            self.children.insert(max(0, min(index, len(self.children))), node)
        self.update()
        return node

    def remove_child(self, node_or_index: TreeNode | int) -> TreeNode | None:
        """Detach and return a child; unknown nodes and bad indices are ignored."""
        idx = self._index_of(node_or_index)
        if not 0 <= idx < len(self.children):
            return None
        child = self.children.pop(idx)
        child._parent_ref = None
        self.update()
        return child

    def replace_child(self, node_or_index: TreeNode | int, new_node: TreeNode) -> TreeNode | None:
        """Swap the child at ``node_or_index`` for ``new_node``; returns the old child."""
        idx = self._index_of(node_or_index)
        if not 0 <= idx < len(self.children):
            return None
        old = self.children[idx]
        if old is new_node:
            return None
        current = new_node.parent
        if current is not None:
            current.remove_child(new_node)
            idx = self._index_of(old)
        old._parent_ref = None
        self.children[idx] = new_node
        new_node._parent_ref = weakref.ref(self)
        self.update()
        return old

    def get_child(self, idx: int) -> TreeNode | None:
        """Return the child at ``idx`` clamped into range, or ``None`` when childless."""
        clamped = self._constrain_idx(idx)
        if clamped == NO_ACTIVE_CHILD:
            return None
        return self.children[clamped]

    def has_children(self) -> bool:
        return len(self.children) > 0

    def visible_children(self, start: int, end: int) -> list[TreeNode]:
        """Children in the half-open window ``[start, end)``."""
        return self.children[max(0, start) : max(0, end)]

    def get_active_child(self) -> TreeNode | None:
        if self.active_idx == NO_ACTIVE_CHILD or self.active_idx >= len(self.children):
            return None
        return self.children[self.active_idx]

    def get_previous_active_child(self) -> TreeNode | None:
        if not 0 <= self.previous_active_idx < len(self.children):
            return None
        return self.children[self.previous_active_idx]

    def set_active_child(self, node_or_index: TreeNode | int) -> bool:
        """Highlight a child, clamping the index; returns whether it changed.

        A node that is not a child of this node leaves the selection unchanged.
        """
        idx = self._index_of(node_or_index)
        if isinstance(node_or_index, TreeNode) and idx < 0:
            return False
        new_idx = self._constrain_idx(idx)
        if new_idx == self.active_idx:
            return False
        self.previous_active_idx = self.active_idx
        self.active_idx = new_idx
        return True

    def update(self) -> bool:
        """Re-clamp ``active_idx`` after ``children`` changed; returns whether it moved."""
        new_idx = self._constrain_idx(self.active_idx)
        changed = new_idx != self.active_idx
        self.active_idx = new_idx
        return changed

    def name(self) -> str:
        name = self.data.get("name")
        return str(name) if name else "Default Node"

    def list_item_label(self) -> str:
        """Label shown for this node in its parent's child list."""
        return self.name()

    def search_text(self) -> str:
        return self.list_item_label()

    def ancestors(self) -> Iterator[TreeNode]:
        """Yield parents from the nearest up to the root."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def path(self) -> list[TreeNode]:
        """Nodes from the root down to and including this node."""
        return [*reversed(list(self.ancestors())), self]

    def destroy(self, remove_from_parent: bool = False) -> None:
        """Tear down this subtree, clearing every reference it holds."""
        if remove_from_parent and self.parent is not None:
            self.parent.remove_child(self)
        for child in self.children:
            child._parent_ref = None
            child.destroy()
        self.children = []
        self.data = {}
        self._parent_ref = None
        self.active_idx = NO_ACTIVE_CHILD
        self.previous_active_idx = NO_ACTIVE_CHILD
        self.scroll_pos_y = 0
