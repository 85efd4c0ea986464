"""Binding tables: token sequences mapped to action descriptors.

Tables are immutable once built. Every structural problem (unknown read spec,
a bound sequence that is also the prefix of a longer one, malformed entries)
is reported with ``BindingConfigError`` while the table is being built, so a
running session never meets a broken binding.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from ..errors import BindingConfigError
from .keypress import is_count_digit, normalize_token

logger = logging.getLogger(__name__)

TokenSequence = tuple[str, ...]
BindingValue = Union[str, Mapping[str, Any], None]

_EMPTY_EXTRA: Mapping[str, Any] = MappingProxyType({})
_DESCRIPTOR_KEYS = frozenset({"action", "name", "read", "resumable"})


class ReadKind(enum.Enum):
    """Ways a binding can consume further tokens before it completes."""

    CHAR = "char"
    CHARS = "chars"


@dataclass(frozen=True)
class ReadSpec:
    kind: ReadKind
    length: int = 1

    @classmethod
    def parse(cls, value: object) -> ReadSpec:
        """Build a read spec from its configured form.

        Accepted forms are ``"char"`` and ``{"chars": N}`` with ``N >= 1``.
        """
        if isinstance(value, ReadSpec):
            return value
        if isinstance(value, ReadKind):
            return cls(value, 1)
        if value == ReadKind.CHAR.value:
            return cls(ReadKind.CHAR, 1)
        if isinstance(value, Mapping) and set(value) == {ReadKind.CHARS.value}:
            length = value[ReadKind.CHARS.value]
            if isinstance(length, bool) or not isinstance(length, int) or length < 1:
                raise BindingConfigError(f"read length must be a positive integer, got {length!r}")
            return cls(ReadKind.CHARS, length)
        raise BindingConfigError(f"unknown read function {value!r}")


@dataclass(frozen=True)
class ActionDescriptor:
    """What a bound sequence resolves to."""

    action: str
    read: ReadSpec | None = None
    resumable: bool = False
    extra: Mapping[str, Any] = field(default_factory=lambda: _EMPTY_EXTRA)

    @classmethod
    def parse(cls, value: BindingValue) -> ActionDescriptor:
        """Build a descriptor from an action string or a descriptor mapping."""
        if isinstance(value, ActionDescriptor):
            return value
        if isinstance(value, str):
            if not value:
                raise BindingConfigError("action name must not be empty")
            return cls(value)
        if not isinstance(value, Mapping):
            raise BindingConfigError(f"binding must be a string or mapping, got {type(value).__name__}")

        action = value.get("action", value.get("name"))
        if not isinstance(action, str) or not action:
            raise BindingConfigError(f"binding {dict(value)!r} has no action name")
        read_value = value.get("read")
        read = ReadSpec.parse(read_value) if read_value is not None else None
        resumable = value.get("resumable", False)
        if not isinstance(resumable, bool):
            raise BindingConfigError(f"resumable must be a boolean, got {resumable!r}")
        if resumable and read is None:
            raise BindingConfigError(f"resumable binding {action!r} must declare a read")
        extra = {key: item for key, item in value.items() if key not in _DESCRIPTOR_KEYS}
        return cls(
            action=action,
            read=read,
            resumable=resumable,
            extra=MappingProxyType(extra) if extra else _EMPTY_EXTRA,
        )


def parse_sequence(key: str | TokenSequence) -> TokenSequence:
    """Split a configured key (``"g g"``) into normalized tokens."""
    if isinstance(key, tuple):
        tokens = tuple(normalize_token(token) for token in key)
    elif isinstance(key, str):
        # A lone space is a valid single-token binding.
        tokens = (key,) if key == " " else tuple(normalize_token(part) for part in key.split(" ") if part)
    else:
        raise BindingConfigError(f"binding key must be a string, got {type(key).__name__}")
    if not tokens or any(not token for token in tokens):
        raise BindingConfigError(f"binding key {key!r} has no tokens")
    return tokens


def format_sequence(tokens: TokenSequence) -> str:
    """Inverse of ``parse_sequence`` for display and command key strings."""
    return " ".join(tokens)


PrefixTree = dict[str, "PrefixTree"]


def build_prefix_tree(sequences: Iterator[TokenSequence] | list[TokenSequence]) -> PrefixTree:
    """Index every bound multi-token sequence by its leading tokens."""
    tree: PrefixTree = {}
    for tokens in sequences:
        node = tree
        for token in tokens[:-1]:
            node = node.setdefault(token, {})
    return tree


class BindingTable(Mapping[TokenSequence, ActionDescriptor]):
    """Immutable ordered mapping of token sequences to action descriptors."""

    def __init__(self, bindings: Mapping[Any, BindingValue] | None = None) -> None:
        entries: dict[TokenSequence, ActionDescriptor] = {}
        for key, value in (bindings or {}).items():
            tokens = parse_sequence(key)
            if value is None:
                entries.pop(tokens, None)
                continue
            if is_count_digit(tokens[0]) and tokens[0] != "0":
                raise BindingConfigError(
                    f"binding {format_sequence(tokens)!r} starts with a count digit and can never fire"
                )
            entries[tokens] = ActionDescriptor.parse(value)
        self._entries = entries
        self._prefix_tree = build_prefix_tree(list(entries))
        self._check_overlaps()
        logger.debug("built binding table with %d entries", len(entries))

    def _check_overlaps(self) -> None:
        for tokens in self._entries:
            node = self._prefix_tree
            for token in tokens:
                if token not in node:
                    break
                node = node[token]
            else:
                longer = next(
                    (other for other in self._entries if len(other) > len(tokens) and other[: len(tokens)] == tokens),
                    None,
                )
                raise BindingConfigError(
                    f"binding {format_sequence(tokens)!r} is a prefix of "
                    f"{format_sequence(longer or tokens)!r}"
                )

    def __getitem__(self, tokens: TokenSequence) -> ActionDescriptor:
        return self._entries[tokens]

    def __iter__(self) -> Iterator[TokenSequence]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BindingTable({len(self._entries)} bindings)"

    @property
    def prefix_tree(self) -> PrefixTree:
        return self._prefix_tree

    def lookup(self, tokens: TokenSequence) -> ActionDescriptor | None:
        return self._entries.get(tokens)

    def merged(self, overrides: Mapping[Any, BindingValue]) -> BindingTable:
        """Return a new table with ``overrides`` applied; ``None`` values unbind."""
        combined: dict[Any, BindingValue] = dict(self._entries)
        for key, value in overrides.items():
            tokens = parse_sequence(key)
            if value is None:
                combined.pop(tokens, None)
            else:
                combined[tokens] = value
        return BindingTable(combined)

    def without(self, key: str | TokenSequence) -> BindingTable:
        """Return a new table with ``key`` unbound."""
        return self.merged({parse_sequence(key): None})

    def to_config(self) -> dict[str, BindingValue]:
        """Render the table back into its JSON-compatible configured form."""
        out: dict[str, BindingValue] = {}
        for tokens, descriptor in self._entries.items():
            if descriptor.read is None and not descriptor.resumable and not descriptor.extra:
                out[format_sequence(tokens)] = descriptor.action
                continue
            value: dict[str, Any] = {"action": descriptor.action}
            if descriptor.read is not None:
                if descriptor.read.kind is ReadKind.CHAR:
                    value["read"] = ReadKind.CHAR.value
                else:
                    value["read"] = {ReadKind.CHARS.value: descriptor.read.length}
            if descriptor.resumable:
                value["resumable"] = True
            value.update(descriptor.extra)
            out[format_sequence(tokens)] = value
        return out


DEFAULT_BINDINGS: dict[str, BindingValue] = {
    "escape": "escape",
    "enter": "enter",
    "up": "cursor-up",
    "left": "cursor-left",
    "right": "cursor-right",
    "down": "cursor-down",
    "k": "cursor-up",
    "h": "cursor-left",
    "l": "cursor-right",
    "j": "cursor-down",
    "^": "cursor-to-document-left",
    "0": "cursor-to-document-left",
    "$": "cursor-to-document-right",
    "g g": "cursor-to-document-top",
    "G": "cursor-to-document-bottom",
    "H": "cursor-to-window-top",
    "M": "cursor-to-window-middle",
    "L": "cursor-to-window-bottom",
    "ctrl+f": "scroll-full-window-down",
    "ctrl+b": "scroll-full-window-up",
    "ctrl+d": "scroll-half-window-down",
    "ctrl+u": "scroll-half-window-up",
    "z t": "scroll-cursor-to-window-top",
    "z z": "scroll-cursor-to-window-middle",
    "z b": "scroll-cursor-to-window-bottom",
    "n": "search-next",
    "N": "search-previous",
    "f": {"action": "find", "read": "char"},
    ":": {"action": "enter-command-mode", "command_alias": None},
    "/": {"action": "enter-command-mode", "command_alias": "search-next"},
    "?": {"action": "enter-command-mode", "command_alias": "search-previous"},
    '"': {"action": "register", "read": "char", "resumable": True},
    "shift+up": "scroll-child-view-up",
    "shift+down": "scroll-child-view-down",
    "ctrl+shift+up": "scroll-child-view-up-fast",
    "ctrl+shift+down": "scroll-child-view-down-fast",
}


def default_binding_table(overrides: Mapping[Any, BindingValue] | None = None) -> BindingTable:
    """Build the stock vi table, optionally with user ``overrides`` merged on top."""
    table = BindingTable(DEFAULT_BINDINGS)
    if overrides:
        table = table.merged(overrides)
    return table
