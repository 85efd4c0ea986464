"""Exception types raised by vats.

Interactive input never raises; only setup-time misconfiguration does.
"""

from __future__ import annotations


class VatsError(Exception):
    """Base class for all vats errors."""


class BindingConfigError(VatsError, ValueError):
    """Binding table could not be built from the supplied configuration."""


class UnknownActionError(VatsError, KeyError):
    """Navigator was asked to compute a motion it does not implement."""

    def __init__(self, action: str) -> None:
        super().__init__(action)
        self.action = action

    def __str__(self) -> str:
        return f"cannot calculate motion for action {self.action!r}"
