"""Terminal control helpers for interactive sessions.

Owns the raw-mode lifecycle only; vats never draws to the screen itself.
"""

from __future__ import annotations

import contextlib
import termios
import tty
from collections.abc import Iterator


class TerminalController:
    """Switch a tty between raw key-at-a-time input and its saved state."""

    def __init__(self, stdin_fd: int) -> None:
        """Capture tty state of ``stdin_fd`` for later restoration."""
        self.stdin_fd = stdin_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd)
        self._raw = False

    @property
    def is_raw(self) -> bool:
        return self._raw

    def enable_raw_mode(self) -> None:
        """Deliver every keystroke immediately, including ctrl combinations."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        self._raw = True

    def restore(self) -> None:
        """Put the terminal back into the state captured at construction."""
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        self._raw = False

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[None]:
        """Context manager that brackets code with raw-mode enter/exit calls."""
        try:
            self.enable_raw_mode()
            yield
        finally:
            self.restore()
