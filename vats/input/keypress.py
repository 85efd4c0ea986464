"""Keystroke records and canonical token formatting.

A ``Keypress`` is what the raw reader produces for one physical key.
``canonicalize`` folds it into the single token string bindings are keyed by.
"""

from __future__ import annotations

from dataclasses import dataclass

# Named keys that may carry a ``shift+`` prefix. Printable characters already
# encode shift in the character itself ("N", not "shift+n").
SHIFTABLE_KEYS = frozenset(
    {"escape", "enter", "return", "tab", "backspace", "up", "down", "left", "right"}
)

KEY_ALIASES = {
    "return": "enter",
    "esc": "escape",
}

MODIFIER_ORDER = ("ctrl", "option", "meta", "shift")


@dataclass(frozen=True)
class Keypress:
    """One decoded keystroke: literal character, key name, raw sequence, modifiers."""

    char: str | None = None
    name: str | None = None
    sequence: str | None = None
    ctrl: bool = False
    option: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def raw_sequence(self) -> str | None:
        """Return the raw sequence, defaulting to the literal character."""
        return self.sequence if self.sequence is not None else self.char


def _is_literal(keypress: Keypress) -> bool:
    char = keypress.char
    return bool(char) and char == keypress.raw_sequence and char.isprintable()


def _base_identifier(keypress: Keypress) -> str:
    if keypress.ctrl or keypress.meta:
        base = keypress.name or keypress.char or ""
    elif _is_literal(keypress):
        base = keypress.char or ""
    else:
        base = keypress.name or keypress.char or ""
    if keypress.name in KEY_ALIASES:
        return KEY_ALIASES[keypress.name]
    return KEY_ALIASES.get(base, base)


def canonicalize(keypress: Keypress) -> str:
    """Return the canonical token for ``keypress``.

    Modifier prefixes always render as ``ctrl+option+meta+shift+<base>``.
    ``meta`` is not applied to ``escape`` and ``shift`` only to named keys in
    ``SHIFTABLE_KEYS``.
    """
    base = _base_identifier(keypress)
    if not base:
        return ""

    prefixes: list[str] = []
    if keypress.ctrl:
        prefixes.append("ctrl")
    if keypress.option:
        prefixes.append("option")
    if keypress.meta and base != "escape":
        prefixes.append("meta")
    if keypress.shift and keypress.name in SHIFTABLE_KEYS:
        prefixes.append("shift")

    if not prefixes:
        return base
    return "+".join(prefixes) + "+" + base


def canonical_token(
    char: str | None,
    name: str | None = None,
    *,
    sequence: str | None = None,
    ctrl: bool = False,
    option: bool = False,
    meta: bool = False,
    shift: bool = False,
) -> str:
    """Keyword form of ``canonicalize`` for callers without a ``Keypress``."""
    return canonicalize(
        Keypress(
            char=char,
            name=name,
            sequence=sequence,
            ctrl=ctrl,
            option=option,
            meta=meta,
            shift=shift,
        )
    )


def split_token(token: str) -> tuple[frozenset[str], str]:
    """Split ``token`` into its modifier set and base identifier.

    A bare ``+`` and tokens ending in ``++`` keep the plus sign as base.
    """
    modifiers: set[str] = set()
    rest = token
    while True:
        head, sep, tail = rest.partition("+")
        if not sep or head not in MODIFIER_ORDER or not tail:
            break
        modifiers.add(head)
        rest = tail
    return frozenset(modifiers), rest


def is_count_digit(token: str) -> bool:
    """Return whether ``token`` is a bare ASCII digit usable in a count prefix."""
    return len(token) == 1 and "0" <= token <= "9"


def normalize_token(token: str) -> str:
    """Rewrite a configured token so its modifiers follow ``MODIFIER_ORDER``."""
    modifiers, base = split_token(token)
    if not modifiers:
        return KEY_ALIASES.get(token, token)
    base = KEY_ALIASES.get(base, base)
    ordered = [name for name in MODIFIER_ORDER if name in modifiers]
    return "+".join(ordered) + "+" + base
