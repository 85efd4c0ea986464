"""Raw-mode lifecycle of ``TerminalController``."""

from __future__ import annotations

import termios
import unittest
from unittest import mock

from vats.terminal import TerminalController


class TerminalControllerTests(unittest.TestCase):
    def test_enable_and_restore_raw_mode(self) -> None:
        saved_state = [1, 2, 3]

        with mock.patch("vats.terminal.termios.tcgetattr", return_value=saved_state), mock.patch(
            "vats.terminal.tty.setraw"
        ) as setraw_mock, mock.patch("vats.terminal.termios.tcsetattr") as setattr_mock:
            controller = TerminalController(stdin_fd=0)
            controller.enable_raw_mode()
            self.assertTrue(controller.is_raw)
            controller.restore()

        self.assertFalse(controller.is_raw)
        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        setattr_mock.assert_called_once_with(0, termios.TCSAFLUSH, saved_state)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        with mock.patch("vats.terminal.termios.tcgetattr", return_value=[0]):
            controller = TerminalController(stdin_fd=0)

        with mock.patch.object(controller, "enable_raw_mode") as enable_mock, mock.patch.object(
            controller, "restore"
        ) as restore_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        restore_mock.assert_called_once()


if __name__ == "__main__":
    unittest.main()
