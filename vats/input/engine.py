"""Keybinding state machine: canonical tokens in, resolved commands out.

The engine accumulates a repeat count, walks multi-token sequences through the
table's prefix tree, and switches to a reading state for bindings that take
extra characters (vi ``f<char>``). One engine belongs to one session.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .bindings import ActionDescriptor, BindingTable, PrefixTree, ReadKind, ReadSpec, TokenSequence, format_sequence
from .keypress import Keypress, canonicalize, is_count_digit

logger = logging.getLogger(__name__)

CANCEL_TOKEN = "escape"
READ_CANCEL_TOKENS = frozenset({"escape", "backspace"})


class _NeedMore:
    def __repr__(self) -> str:
        return "NEED_MORE"


NEED_MORE: Any = _NeedMore()


class InputMode(enum.Enum):
    PENDING = "pending"
    READING = "reading"


class ReadRoutine:
    """Consumes tokens after a binding matched; returns ``NEED_MORE`` until done."""

    def feed(self, token: str) -> Any:
        raise NotImplementedError


class ReadOneChar(ReadRoutine):
    def feed(self, token: str) -> str:
        return token


class ReadChars(ReadRoutine):
    def __init__(self, length: int) -> None:
        self.length = max(1, length)
        self.tokens: list[str] = []

    def feed(self, token: str) -> Any:
        self.tokens.append(token)
        if len(self.tokens) < self.length:
            return NEED_MORE
        return tuple(self.tokens)


def make_read_routine(spec: ReadSpec) -> ReadRoutine:
    """Instantiate the read routine for ``spec``."""
    if spec.kind is ReadKind.CHAR:
        return ReadOneChar()
    return ReadChars(spec.length)


@dataclass(frozen=True)
class Command:
    """One resolved binding, emitted exactly once."""

    tokens: TokenSequence
    action: str
    count: int = 1
    read_result: Any = None
    extra: Mapping[str, Any] = field(default_factory=dict)
    carried: Mapping[str, Any] = field(default_factory=dict)

    @property
    def key_string(self) -> str:
        return format_sequence(self.tokens)

    def get(self, key: str, default: Any = None) -> Any:
        """Return an ``extra`` attribute of the binding."""
        return self.extra.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a JSON-compatible event payload."""
        payload: dict[str, Any] = {
            "tokens": list(self.tokens),
            "key_string": self.key_string,
            "action": self.action,
            "count": self.count,
            "read_result": list(self.read_result) if isinstance(self.read_result, tuple) else self.read_result,
        }
        if self.carried:
            payload["carried"] = dict(self.carried)
        payload.update(self.extra)
        return payload


@dataclass
class InputAccumulator:
    """Mutable per-session input state between keystrokes."""

    prefix_root: PrefixTree
    pending_count: str = ""
    pending_tokens: list[str] = field(default_factory=list)
    tree_cursor: PrefixTree | None = None
    mode: InputMode = InputMode.PENDING
    descriptor: ActionDescriptor | None = None
    read_routine: ReadRoutine | None = None
    carried: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.tree_cursor is None:
            self.tree_cursor = self.prefix_root

    def reset(self, *, keep_carried: bool = False) -> None:
        self.pending_count = ""
        self.pending_tokens = []
        self.tree_cursor = self.prefix_root
        self.mode = InputMode.PENDING
        self.descriptor = None
        self.read_routine = None
        if not keep_carried:
            self.carried = {}

    def is_empty(self) -> bool:
        return (
            not self.pending_count
            and not self.pending_tokens
            and self.mode is InputMode.PENDING
            and not self.carried
        )


class KeybindingEngine:
    """Turn a token stream into ``Command`` objects using a ``BindingTable``."""

    def __init__(self, table: BindingTable) -> None:
        self._table = table
        self._acc = InputAccumulator(prefix_root=table.prefix_tree)

    @property
    def table(self) -> BindingTable:
        return self._table

    @property
    def accumulator(self) -> InputAccumulator:
        return self._acc

    @property
    def is_reading(self) -> bool:
        return self._acc.mode is InputMode.READING

    @property
    def pending_input(self) -> str:
        """Keys typed toward the next command, for a vi-style showcmd area."""
        acc = self._acc
        parts = [acc.pending_count + "".join(acc.pending_tokens)]
        if isinstance(acc.read_routine, ReadChars):
            parts.append("".join(acc.read_routine.tokens))
        return "".join(parts)

    def install(self, table: BindingTable) -> None:
        """Swap in a new table and drop any partially typed input."""
        self._table = table
        self._acc = InputAccumulator(prefix_root=table.prefix_tree)
        logger.debug("installed binding table with %d entries", len(table))

    def reset(self) -> None:
        self._acc.reset()

    def handle_keypress(self, keypress: Keypress) -> Command | None:
        return self.handle_token(canonicalize(keypress))

    def handle_token(self, token: str) -> Command | None:
        """Advance the state machine by one token.

        Returns a ``Command`` when ``token`` completes a binding, else ``None``.
        Unmatched sequences and cancellations silently reset the accumulator.
        """
        if not token:
            return None
        acc = self._acc

        if acc.mode is InputMode.READING:
            if token in READ_CANCEL_TOKENS:
                logger.debug("read for %r cancelled by %r", acc.descriptor and acc.descriptor.action, token)
                acc.reset()
                return None
            assert acc.read_routine is not None
            result = acc.read_routine.feed(token)
            if result is NEED_MORE:
                return None
            return self._complete_read(result)

        if token == CANCEL_TOKEN and not acc.is_empty():
            logger.debug("pending input %r cancelled", self.pending_input)
            acc.reset()
            return None

        if is_count_digit(token) and not acc.pending_tokens and (token != "0" or acc.pending_count):
            acc.pending_count += token
            return None

        acc.pending_tokens.append(token)
        tokens = tuple(acc.pending_tokens)
        descriptor = self._table.lookup(tokens)

        if descriptor is None:
            assert acc.tree_cursor is not None
            subtree = acc.tree_cursor.get(token)
            if subtree is not None:
                acc.tree_cursor = subtree
                return None
            logger.debug("abandoning unmatched sequence %r", acc.pending_count + format_sequence(tokens))
            acc.reset()
            return None

        if descriptor.read is not None:
            acc.mode = InputMode.READING
            acc.descriptor = descriptor
            acc.read_routine = make_read_routine(descriptor.read)
            logger.debug("reading %s for %r", descriptor.read.kind.value, descriptor.action)
            return None

        command = self._build_command(descriptor, None)
        acc.reset()
        return command

    def _complete_read(self, result: Any) -> Command:
        acc = self._acc
        descriptor = acc.descriptor
        assert descriptor is not None
        command = self._build_command(descriptor, result)
        if descriptor.resumable:
            carried = dict(acc.carried)
            carried[descriptor.action] = result
            acc.reset()
            acc.carried = carried
        else:
            acc.reset()
        return command

    def _build_command(self, descriptor: ActionDescriptor, read_result: Any) -> Command:
        acc = self._acc
        count = max(1, int(acc.pending_count)) if acc.pending_count else 1
        return Command(
            tokens=tuple(acc.pending_tokens),
            action=descriptor.action,
            count=count,
            read_result=read_result,
            extra=descriptor.extra,
            carried=MappingProxyType(dict(acc.carried)) if acc.carried else MappingProxyType({}),
        )
