"""Low-level terminal input decoding.

Reads raw bytes from a tty file descriptor and turns them into ``Keypress``
records. Handles ESC-sequence timing, ctrl/meta combos, modified arrows and
multi-byte UTF-8 characters.
"""

from __future__ import annotations

import logging
import os
import select

from .keypress import Keypress

logger = logging.getLogger(__name__)

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_NAMES = {
    b"\t": ("tab", False),
    b"\r": ("return", False),
    b"\n": ("enter", False),
    b"\x08": ("backspace", False),
    b"\x7f": ("backspace", False),
    b"\x00": ("space", True),
}

_ARROW_NAMES = {
    b"A": "up",
    b"B": "down",
    b"C": "right",
    b"D": "left",
    b"H": "home",
    b"F": "end",
}

# SS3 (ESC O) and xterm CSI 1;m finals for F1-F4.
_FUNCTION_NAMES = {
    b"P": "f1",
    b"Q": "f2",
    b"R": "f3",
    b"S": "f4",
}

_TILDE_NAMES = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageup",
    "6": "pagedown",
}

# xterm modifier parameter: 1 + (shift | alt << 1 | ctrl << 2)
_MODIFIER_BITS_SHIFT = 0b001
_MODIFIER_BITS_ALT = 0b010
_MODIFIER_BITS_CTRL = 0b100


def _utf8_length(first: int) -> int:
    if first >= 0xF0:
        return 4
    if first >= 0xE0:
        return 3
    if first >= 0xC0:
        return 2
    return 1


class KeyReader:
    """Decode keypresses from ``fd``, keeping pushed-back bytes between reads."""

    def __init__(self, fd: int, escape_timeout_ms: int = ESC_SEQUENCE_TIMEOUT_MS) -> None:
        self.fd = fd
        self.escape_timeout_ms = escape_timeout_ms
        self._pending: list[bytes] = []

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def _read_first_byte(self, timeout_ms: int | None) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        if timeout_ms is not None:
            ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        ch = os.read(self.fd, 1)
        return ch or None

    def read(self, timeout_ms: int | None = None) -> Keypress | None:
        """Read one keypress; ``None`` on timeout or end of input."""
        ch = self._read_first_byte(timeout_ms)
        if ch is None:
            return None
        if ch == b"\x1b":
            return self._read_escape()
        return self._decode_plain(ch, meta=False)

    def _decode_plain(self, ch: bytes, *, meta: bool) -> Keypress:
        sequence_prefix = "\x1b" if meta else ""
        text = ch.decode("latin-1")
        if ch in _CONTROL_NAMES:
            name, ctrl = _CONTROL_NAMES[ch]
            return Keypress(char=text, name=name, sequence=sequence_prefix + text, ctrl=ctrl, meta=meta)
        code = ch[0]
        if 0x01 <= code <= 0x1A:
            name = chr(code + 0x60)
            return Keypress(char=text, name=name, sequence=sequence_prefix + text, ctrl=True, meta=meta)
        if code < 0x20:
            return Keypress(char=text, name=None, sequence=sequence_prefix + text, ctrl=True, meta=meta)

        length = _utf8_length(code)
        raw = ch
        for _ in range(length - 1):
            more = self._read_ready_byte(self.escape_timeout_ms)
            if more is None:
                break
            raw += more
        char = raw.decode("utf-8", errors="replace")
        name = char.lower() if char.isalpha() and len(char) == 1 else None
        return Keypress(
            char=char,
            name=name,
            sequence=sequence_prefix + char,
            meta=meta,
            shift=char.isupper(),
        )

    def _read_escape(self) -> Keypress:
        escape = Keypress(char="\x1b", name="escape", sequence="\x1b")
        seq = self._read_ready_byte(self.escape_timeout_ms)
        if seq is None:
            return escape
        if seq == b"\x1b":
            return Keypress(char="\x1b", name="escape", sequence="\x1b\x1b", meta=True)
        if seq not in {b"[", b"O"}:
            return self._decode_plain(seq, meta=True)

        final = self._read_ready_byte(self.escape_timeout_ms)
        if final is None:
            # Lone "ESC [" is treated as meta+[.
            return Keypress(char="[", name=None, sequence="\x1b[", meta=True)
        if final in _ARROW_NAMES:
            name = _ARROW_NAMES[final]
            return Keypress(name=name, sequence="\x1b" + (seq + final).decode("ascii"))
        if final.isalpha():
            return self._decode_csi(final, seq)

        params = final
        while True:
            if len(params) > 16:
                logger.debug("dropping overlong escape sequence %r", params)
                return escape
            part = self._read_ready_byte(self.escape_timeout_ms)
            if part is None:
                logger.debug("incomplete escape sequence %r", params)
                return escape
            params += part
            if part.isalpha() or part == b"~":
                break
        return self._decode_csi(params, seq)

    def _decode_csi(self, params: bytes, introducer: bytes) -> Keypress:
        sequence = "\x1b" + (introducer + params).decode("ascii", errors="replace")
        final = params[-1:]
        body = params[:-1].decode("ascii", errors="replace")
        fields = body.split(";")

        modifier_bits = 0
        if len(fields) >= 2 and fields[1].isdigit():
            modifier_bits = max(0, int(fields[1]) - 1)
        shift = bool(modifier_bits & _MODIFIER_BITS_SHIFT)
        meta = bool(modifier_bits & _MODIFIER_BITS_ALT)
        ctrl = bool(modifier_bits & _MODIFIER_BITS_CTRL)

        if final in _ARROW_NAMES:
            name = _ARROW_NAMES[final]
        elif final == b"~" and fields and fields[0] in _TILDE_NAMES:
            name = _TILDE_NAMES[fields[0]]
        elif final in _FUNCTION_NAMES:
            name = _FUNCTION_NAMES[final]
        elif final == b"Z":
            return Keypress(name="tab", sequence=sequence, shift=True)
        else:
            logger.debug("unrecognised CSI sequence %r", sequence)
            name = "undefined"
        return Keypress(name=name, sequence=sequence, ctrl=ctrl, meta=meta, shift=shift)

