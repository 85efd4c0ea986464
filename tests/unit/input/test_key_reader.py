"""Raw-byte decoding through ``KeyReader`` over an OS pipe."""

from __future__ import annotations

import os
import time
import unittest

from vats.input.keypress import canonicalize
from vats.input.reader import KeyReader


class KeyReaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.read_fd, self.write_fd = os.pipe()
        self.reader = KeyReader(self.read_fd, escape_timeout_ms=20)

    def tearDown(self) -> None:
        os.close(self.read_fd)
        os.close(self.write_fd)

    def _tokens(self, data: bytes, count: int) -> list[str]:
        os.write(self.write_fd, data)
        tokens = []
        for _ in range(count):
            keypress = self.reader.read(timeout_ms=20)
            self.assertIsNotNone(keypress)
            tokens.append(canonicalize(keypress))
        return tokens

    def test_plain_characters(self) -> None:
        self.assertEqual(self._tokens(b"jG$", 3), ["j", "G", "$"])

    def test_lone_escape_does_not_wait_for_another_key(self) -> None:
        os.write(self.write_fd, b"\x1b")
        started = time.monotonic()
        keypress = self.reader.read(timeout_ms=20)
        elapsed = time.monotonic() - started

        self.assertEqual(canonicalize(keypress), "escape")
        self.assertLess(elapsed, 0.2)

    def test_arrow_sequences(self) -> None:
        self.assertEqual(self._tokens(b"\x1b[A\x1b[B\x1bOC\x1b[D", 4), ["up", "down", "right", "left"])

    def test_modified_arrows(self) -> None:
        self.assertEqual(self._tokens(b"\x1b[1;2A\x1b[1;6B", 2), ["shift+up", "ctrl+shift+down"])

    def test_control_bytes(self) -> None:
        self.assertEqual(self._tokens(b"\x06\x02\r\t\x7f", 5), ["ctrl+f", "ctrl+b", "enter", "tab", "backspace"])

    def test_escape_prefix_is_meta(self) -> None:
        self.assertEqual(self._tokens(b"\x1bx", 1), ["meta+x"])

    def test_double_escape_is_escape(self) -> None:
        self.assertEqual(self._tokens(b"\x1b\x1b", 1), ["escape"])

    def test_back_tab(self) -> None:
        self.assertEqual(self._tokens(b"\x1b[Z", 1), ["shift+tab"])

    def test_tilde_sequences(self) -> None:
        self.assertEqual(self._tokens(b"\x1b[5~\x1b[3~", 2), ["pageup", "delete"])

    def test_ss3_function_key_keeps_its_introducer(self) -> None:
        os.write(self.write_fd, b"\x1bOP")
        keypress = self.reader.read(timeout_ms=20)
        self.assertEqual(keypress.sequence, "\x1bOP")
        self.assertEqual(canonicalize(keypress), "f1")

    def test_csi_function_key_with_modifier(self) -> None:
        os.write(self.write_fd, b"\x1b[1;5P")
        keypress = self.reader.read(timeout_ms=20)
        self.assertEqual(keypress.sequence, "\x1b[1;5P")
        self.assertEqual(canonicalize(keypress), "ctrl+f1")

    def test_utf8_character(self) -> None:
        self.assertEqual(self._tokens("é".encode("utf-8"), 1), ["é"])

    def test_timeout_returns_none(self) -> None:
        self.assertIsNone(self.reader.read(timeout_ms=10))


if __name__ == "__main__":
    unittest.main()
