"""Persistent JSON config helpers.

Stores keybinding overrides, search case preference, and the default window
height used when no terminal size is available. Unreadable or malformed
config falls back safely; structurally invalid keybindings are left for the
binding table to reject when it is installed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "vats"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_WINDOW_HEIGHT = 20


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never breaks an interactive session.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def load_keybindings(path: Path | None = None) -> dict[str, object]:
    """Return keybinding overrides keyed by space-joined token sequences.

    With ``path`` the file is a bare JSON object of bindings; otherwise the
    ``keybindings`` entry of the main config is used. Entries whose key is not
    a string or whose value is not a string, object or ``null`` are dropped.
    """
    if path is not None:
        try:
            value: object = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable keybindings file %s: %s", path, exc)
            return {}
    else:
        value = load_config().get("keybindings")
    if not isinstance(value, dict):
        return {}

    bindings: dict[str, object] = {}
    for key, binding in value.items():
        if not isinstance(key, str) or not key:
            continue
        if binding is not None and not isinstance(binding, (str, dict)):
            logger.warning("dropping keybinding %r with unsupported value %r", key, binding)
            continue
        bindings[key] = binding
    return bindings


def save_keybindings(bindings: dict[str, object]) -> None:
    """Persist keybinding overrides under the ``keybindings`` key."""
    config = load_config()
    config["keybindings"] = dict(bindings)
    save_config(config)


def load_ignore_case() -> bool:
    """Return persisted search case preference; only explicit booleans count."""
    value = load_config().get("ignore_case")
    return bool(value) if isinstance(value, bool) else False


def save_ignore_case(ignore_case: bool) -> None:
    config = load_config()
    config["ignore_case"] = bool(ignore_case)
    save_config(config)


def save_window_height(rows: int) -> None:
    config = load_config()
    config["window_height"] = max(1, int(rows))
    save_config(config)


def load_window_height() -> int:
    """Return persisted window height, falling back to ``DEFAULT_WINDOW_HEIGHT``.

    Booleans, non-integers and values below one are treated as unset.
    """
    value = load_config().get("window_height")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_WINDOW_HEIGHT
    return value
