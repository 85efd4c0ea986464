"""Input-layer public API: key decoding, canonical tokens and binding resolution.

Low-level terminal decoding (``KeyReader``) is kept apart from the pure
token/binding machinery so the latter can be driven from any event source.
"""

from .bindings import (
    DEFAULT_BINDINGS,
    ActionDescriptor,
    BindingTable,
    ReadKind,
    ReadSpec,
    default_binding_table,
    format_sequence,
    parse_sequence,
)
from .engine import NEED_MORE, Command, InputMode, KeybindingEngine
from .keypress import SHIFTABLE_KEYS, Keypress, canonical_token, canonicalize
from .reader import ESC_SEQUENCE_TIMEOUT_MS, KeyReader
from .registry import ActionBinding, ActionRegistry

__all__ = [
    "ActionBinding",
    "ActionDescriptor",
    "ActionRegistry",
    "BindingTable",
    "Command",
    "DEFAULT_BINDINGS",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "InputMode",
    "KeyReader",
    "KeybindingEngine",
    "Keypress",
    "NEED_MORE",
    "ReadKind",
    "ReadSpec",
    "SHIFTABLE_KEYS",
    "canonical_token",
    "canonicalize",
    "default_binding_table",
    "format_sequence",
    "parse_sequence",
]
