"""Public package surface for vats.

Exports ``main`` for programmatic CLI invocation plus the session and tree
types most embedders need. Everything else lives in submodules.
"""

from __future__ import annotations

from .errors import BindingConfigError, UnknownActionError, VatsError
from .session import Event, NavigationSession
from .tree import TreeNode


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = [
    "BindingConfigError",
    "Event",
    "NavigationSession",
    "TreeNode",
    "UnknownActionError",
    "VatsError",
    "main",
]
