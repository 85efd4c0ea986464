"""Vi motions over a two-dimensional document viewport.

``ViState`` is an immutable snapshot; ``apply_action`` returns a new snapshot
plus whether anything changed. Cursor positions are clamped to the document,
scroll offsets to ``[0, document - window]``, and after every change either
the cursor or the scroll offset is corrected so the cursor stays visible.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace

from ..errors import UnknownActionError

_FIELDS = (
    "cursor_x",
    "cursor_y",
    "scroll_x",
    "scroll_y",
    "document_width",
    "document_height",
    "window_width",
    "window_height",
)


@dataclass(frozen=True)
class ViState:
    cursor_x: int = 0
    cursor_y: int = 0
    scroll_x: int = 0
    scroll_y: int = 0
    document_width: int = 0
    document_height: int = 0
    window_width: int = 0
    window_height: int = 0


Target = dict[str, int]
StateMotion = Callable[[ViState, int], Target]


def is_cursor_x_inside_window(state: ViState) -> bool:
    return state.scroll_x <= state.cursor_x <= state.scroll_x + state.window_width


def is_cursor_y_inside_window(state: ViState) -> bool:
    return state.scroll_y <= state.cursor_y <= state.scroll_y + state.window_height


def correct_cursor_x(state: ViState) -> int:
    low = state.scroll_x
    high = state.scroll_x + state.window_width
    return max(0, min(max(state.cursor_x, low), high))


def correct_cursor_y(state: ViState) -> int:
    low = state.scroll_y
    high = state.scroll_y + state.window_height
    return max(0, min(max(state.cursor_y, low), high))


def _max_scroll(document: int, window: int) -> int:
    return max(0, document - window)


def _corrected_scroll(cursor: int, scroll: int, window: int, document: int, previous: int | None) -> int:
    if scroll <= cursor <= scroll + window:
        return scroll
    should_center = previous is not None and abs(cursor - previous) > window / 2
    if should_center:
        target = cursor - window // 2
    else:
        target = cursor - (0 if cursor < scroll else window)
    return max(0, min(_max_scroll(document, window), target))


def correct_scroll_x(state: ViState, previous_cursor_x: int | None = None) -> int:
    return _corrected_scroll(
        state.cursor_x, state.scroll_x, state.window_width, state.document_width, previous_cursor_x
    )


def correct_scroll_y(state: ViState, previous_cursor_y: int | None = None) -> int:
    return _corrected_scroll(
        state.cursor_y, state.scroll_y, state.window_height, state.document_height, previous_cursor_y
    )


def scroll_cursor_to_window_top(state: ViState) -> Target:
    return {"scroll_y": state.cursor_y}


def scroll_cursor_to_window_middle(state: ViState) -> Target:
    scroll_y = state.cursor_y - state.window_height // 2
    return {"scroll_y": max(0, min(_max_scroll(state.document_height, state.window_height), scroll_y))}


def scroll_cursor_to_window_bottom(state: ViState) -> Target:
    return {"scroll_y": state.cursor_y - state.window_height}


def _window_middle(state: ViState) -> int:
    return state.scroll_y + min(state.document_height, state.window_height) // 2


STATE_MOTIONS: dict[str, StateMotion] = {
    "cursor-up": lambda state, count: {"cursor_y": state.cursor_y - count},
    "cursor-down": lambda state, count: {"cursor_y": state.cursor_y + count},
    "cursor-left": lambda state, count: {"cursor_x": state.cursor_x - count},
    "cursor-right": lambda state, count: {"cursor_x": state.cursor_x + count},
    "cursor-to-document-left": lambda state, count: {"cursor_x": 0},
    "cursor-to-document-right": lambda state, count: {"cursor_x": state.document_width},
    "cursor-to-document-top": lambda state, count: {"cursor_y": 0},
    "cursor-to-document-bottom": lambda state, count: {
        "cursor_y": state.document_height,
        "scroll_y": state.document_height - state.window_height,
    },
    "cursor-to-window-top": lambda state, count: {"cursor_y": state.scroll_y},
    "cursor-to-window-middle": lambda state, count: {"cursor_y": _window_middle(state)},
    "cursor-to-window-bottom": lambda state, count: {"cursor_y": state.scroll_y + state.window_height},
    "scroll-full-window-down": lambda state, count: {"cursor_y": state.cursor_y + state.window_height * count},
    "scroll-full-window-up": lambda state, count: {"cursor_y": state.cursor_y - state.window_height * count},
    "scroll-half-window-down": lambda state, count: {"cursor_y": state.cursor_y + state.window_height // 2},
    "scroll-half-window-up": lambda state, count: {"cursor_y": state.cursor_y - state.window_height // 2},
    "scroll-cursor-to-window-top": lambda state, count: scroll_cursor_to_window_top(state),
    "scroll-cursor-to-window-middle": lambda state, count: scroll_cursor_to_window_middle(state),
    "scroll-cursor-to-window-bottom": lambda state, count: scroll_cursor_to_window_bottom(state),
}


def can_calculate(action: str) -> bool:
    return action in STATE_MOTIONS


def calculate_target(state: ViState, action: str, count: int = 1) -> Target:
    """Return the fields ``action`` sets, before clamping."""
    motion = STATE_MOTIONS.get(action)
    if motion is None:
        raise UnknownActionError(action)
    return motion(state, max(1, count))


def clamp_state(state: ViState, target: Mapping[str, int] | None = None, previous: ViState | None = None) -> ViState:
    """Clamp ``state`` into the document and keep the cursor inside the window.

    When ``target`` set a scroll offset without a cursor position the cursor
    is pulled into the window; otherwise the scroll offset follows the cursor,
    centring after jumps longer than half a window measured from ``previous``.
    """
    target = target or {}
    adjust_cursor_x = "scroll_x" in target and "cursor_x" not in target
    adjust_cursor_y = "scroll_y" in target and "cursor_y" not in target

    state = replace(
        state,
        cursor_x=max(0, min(state.cursor_x, state.document_width)),
        cursor_y=max(0, min(state.cursor_y, state.document_height)),
        scroll_x=max(0, min(state.scroll_x, _max_scroll(state.document_width, state.window_width))),
        scroll_y=max(0, min(state.scroll_y, _max_scroll(state.document_height, state.window_height))),
    )

    previous_x = previous.cursor_x if previous is not None else None
    previous_y = previous.cursor_y if previous is not None else None

    if adjust_cursor_x:
        state = replace(state, cursor_x=correct_cursor_x(state))
    else:
        state = replace(state, scroll_x=correct_scroll_x(state, previous_x))

    if adjust_cursor_y:
        state = replace(state, cursor_y=correct_cursor_y(state))
    else:
        state = replace(state, scroll_y=correct_scroll_y(state, previous_y))

    return state


def set_state(state: ViState, target: Mapping[str, int]) -> tuple[ViState, bool]:
    """Apply ``target`` fields to ``state``, clamp, and report whether it changed."""
    unknown = set(target) - set(_FIELDS)
    if unknown:
        raise ValueError(f"unknown state fields: {sorted(unknown)}")
    if not target:
        return state, False
    updated = clamp_state(replace(state, **target), target, previous=state)
    return updated, updated != state


def apply_action(state: ViState, action: str, count: int = 1) -> tuple[ViState, bool]:
    """Run ``action`` against ``state``; returns the new state and a changed flag."""
    return set_state(state, calculate_target(state, action, count))
