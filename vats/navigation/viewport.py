"""Vi-style cursor motions over a one-dimensional list viewport.

Every function is pure: callers pass the page height (last valid row index),
the inclusive ``(start, end)`` bounds of the visible window and the current
cursor row, and get back a ``Motion``. Nothing is cached between calls.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..errors import UnknownActionError

NO_SCROLL_CHANGE = -1

Bounds = tuple[int, int]


@dataclass(frozen=True)
class Motion:
    """Target cursor row and scroll row; ``scroll_row`` may be ``NO_SCROLL_CHANGE``."""

    cursor_row: int
    scroll_row: int = NO_SCROLL_CHANGE

    @property
    def scrolls(self) -> bool:
        return self.scroll_row != NO_SCROLL_CHANGE


def _clamp_row(row: int, page_height: int) -> int:
    return max(0, min(page_height, row))


def _window_height(bounds: Bounds) -> int:
    start, end = bounds
    return max(0, end - start)


def visible_bounds(scroll_row: int, window_rows: int, page_height: int) -> Bounds:
    """Inclusive bounds of a ``window_rows`` tall window scrolled to ``scroll_row``."""
    start = max(0, scroll_row)
    end = start + max(1, window_rows) - 1
    return start, max(start, min(end, max(0, page_height)))


def cursor_up(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(cursor_row - count, page_height)


def cursor_down(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(cursor_row + count, page_height)


def cursor_to_document_top(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return 0


def cursor_to_document_bottom(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return max(0, page_height)


def cursor_to_window_top(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(bounds[0], page_height)


def cursor_to_window_middle(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    start, end = bounds
    end = min(end, page_height)
    return _clamp_row(start + (end - start) // 2, page_height)


def cursor_to_window_bottom(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(bounds[1], page_height)


def scroll_full_window_down(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(cursor_row + _window_height(bounds) * max(1, count), page_height)


def scroll_full_window_up(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(cursor_row - _window_height(bounds) * max(1, count), page_height)


def scroll_half_window_down(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(cursor_row + _window_height(bounds) // 2, page_height)


def scroll_half_window_up(count: int, page_height: int, bounds: Bounds, cursor_row: int) -> int:
    return _clamp_row(cursor_row - _window_height(bounds) // 2, page_height)


def align_cursor_to_window_top(page_height: int, bounds: Bounds, cursor_row: int) -> Motion:
    """``zt``: keep the cursor, make it the first visible row."""
    return Motion(cursor_row, max(0, cursor_row))


def align_cursor_to_window_middle(page_height: int, bounds: Bounds, cursor_row: int) -> Motion:
    """``zz``: keep the cursor, centre the window on it."""
    return Motion(cursor_row, max(0, cursor_row - _window_height(bounds) // 2))


def align_cursor_to_window_bottom(page_height: int, bounds: Bounds, cursor_row: int) -> Motion:
    """``zb``: keep the cursor, make it the last visible row."""
    return Motion(cursor_row, max(0, cursor_row - _window_height(bounds)))


def scroll_position(row: int, bounds: Bounds, previous_row: int | None = None) -> int:
    """Return the scroll row that keeps ``row`` visible.

    ``NO_SCROLL_CHANGE`` when ``row`` already lies inside ``bounds``. Otherwise
    the window snaps to the near edge, except after a jump of more than half a
    window from ``previous_row``, which centres the window on ``row``.
    """
    start, end = bounds
    if start <= row <= end:
        return NO_SCROLL_CHANGE

    window_height = end - start
    moving_back = row < start
    scroll_row = row if moving_back else row - window_height

    should_center = previous_row is not None and abs(row - previous_row) > window_height / 2
    if should_center:
        scroll_row += (window_height // 2) * (-1 if moving_back else 1)

    return max(0, scroll_row)


RowMotion = Callable[[int, int, Bounds, int], int]
AlignMotion = Callable[[int, Bounds, int], Motion]

ROW_MOTIONS: dict[str, RowMotion] = {
    "cursor-up": cursor_up,
    "cursor-down": cursor_down,
    "cursor-to-document-top": cursor_to_document_top,
    "cursor-to-document-bottom": cursor_to_document_bottom,
    "cursor-to-window-top": cursor_to_window_top,
    "cursor-to-window-middle": cursor_to_window_middle,
    "cursor-to-window-bottom": cursor_to_window_bottom,
    "scroll-full-window-down": scroll_full_window_down,
    "scroll-full-window-up": scroll_full_window_up,
    "scroll-half-window-down": scroll_half_window_down,
    "scroll-half-window-up": scroll_half_window_up,
}

ALIGN_MOTIONS: dict[str, AlignMotion] = {
    "scroll-cursor-to-window-top": align_cursor_to_window_top,
    "scroll-cursor-to-window-middle": align_cursor_to_window_middle,
    "scroll-cursor-to-window-bottom": align_cursor_to_window_bottom,
}


def can_navigate(action: str) -> bool:
    """Return whether ``action`` is a motion this module can compute."""
    return action in ROW_MOTIONS or action in ALIGN_MOTIONS


def navigate(action: str, count: int, page_height: int, bounds: Bounds, cursor_row: int) -> Motion:
    """Compute the cursor row and scroll row that ``action`` leads to."""
    align = ALIGN_MOTIONS.get(action)
    if align is not None:
        return align(page_height, bounds, cursor_row)

    motion = ROW_MOTIONS.get(action)
    if motion is None:
        raise UnknownActionError(action)
    row = motion(count, page_height, bounds, cursor_row)
    return Motion(row, scroll_position(row, bounds, cursor_row))
