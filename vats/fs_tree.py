"""Build ``TreeNode`` hierarchies from directories on disk.

Directories sort before files, names case-insensitively; unreadable
directories simply yield no children.
"""

from __future__ import annotations

import os
from pathlib import Path

from .tree import TreeNode


def _sorted_children(directory: Path, show_hidden: bool) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as entries:
            children = [entry for entry in entries if show_hidden or not entry.name.startswith(".")]
    except OSError:
        return []

    def sort_key(entry: os.DirEntry[str]) -> tuple[bool, str]:
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        return (not is_dir, entry.name.lower())

    return sorted(children, key=sort_key)


def build_directory_tree(root: Path, max_depth: int = 2, show_hidden: bool = False) -> TreeNode:
    """Return a node for ``root`` with descendants down to ``max_depth`` levels."""
    root = root.resolve()
    root_node = TreeNode({"name": root.name or str(root), "path": root, "is_dir": True})

    def walk(directory: Path, node: TreeNode, depth: int) -> None:
        for entry in _sorted_children(directory, show_hidden):
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            child = node.add_child(TreeNode({"name": entry.name, "path": path, "is_dir": is_dir}))
            if is_dir and depth < max_depth:
                walk(path, child, depth + 1)

    if max_depth > 0:
        walk(root, root_node, 1)
    return root_node
