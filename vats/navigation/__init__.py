"""Pure viewport arithmetic for vi motions.

``viewport`` handles one-dimensional item lists (cursor row + scroll row);
``vi_state`` handles two-dimensional documents with horizontal scrolling.
"""

from .vi_state import ViState, apply_action, calculate_target, can_calculate, clamp_state, set_state
from .viewport import NO_SCROLL_CHANGE, Motion, can_navigate, navigate, scroll_position, visible_bounds

__all__ = [
    "Motion",
    "NO_SCROLL_CHANGE",
    "ViState",
    "apply_action",
    "calculate_target",
    "can_calculate",
    "can_navigate",
    "clamp_state",
    "navigate",
    "scroll_position",
    "set_state",
    "visible_bounds",
]
