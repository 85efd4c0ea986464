"""Command-line front door for vats.

Builds a navigation session over a directory tree, puts the terminal in raw
mode and prints every session event as one JSON line. Nothing is drawn; the
output is meant for scripting, binding debugging and demos.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, TextIO

from . import config
from .errors import BindingConfigError
from .fs_tree import build_directory_tree
from .input.bindings import BindingTable, default_binding_table
from .input.engine import Command
from .input.keypress import canonicalize
from .input.reader import KeyReader
from .session import Event, NavigationSession
from .terminal import TerminalController
from .tree import TreeNode

logger = logging.getLogger(__name__)

QUIT_TOKENS = frozenset({"q", "ctrl+c"})
PRINTED_EVENTS = ("keybinding", "highlight", "scroll", "cd", "select", "search")


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values >= 0."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vats",
        description="Navigate a directory tree with vi keys and print resolved commands as JSON lines.",
    )
    parser.add_argument("path", nargs="?", default=None, help="Directory to navigate. Defaults to current directory.")
    parser.add_argument("--bindings", metavar="FILE", help="JSON object of keybinding overrides.")
    parser.add_argument("--list-bindings", action="store_true", help="Print the effective binding table and exit.")
    parser.add_argument("--window-height", type=_positive_int, default=None, help="Visible rows per tree level.")
    parser.add_argument("--depth", type=_nonnegative_int, default=2, help="Directory levels to load (default: 2).")
    parser.add_argument("--hidden", action="store_true", help="Include dot files.")
    parser.add_argument("--ignore-case", action="store_true", default=None, help="Case-insensitive search.")
    parser.add_argument("--search", metavar="QUERY", help="Run an initial search so n/N have a query.")
    parser.add_argument(
        "--save",
        action="store_true",
        help="Persist --bindings, --ignore-case and --window-height as defaults in the config file.",
    )
    parser.add_argument("--log-file", metavar="FILE", help="Write log records to FILE.")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level.")
    return parser


def configure_logging(log_file: str | None, debug: bool) -> None:
    """Route library logging to ``log_file`` (or stderr) at the requested level."""
    level = logging.DEBUG if debug else logging.INFO if log_file else logging.WARNING
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if log_file:
        logging.basicConfig(filename=log_file, level=level, format=fmt)
    else:
        logging.basicConfig(stream=sys.stderr, level=level, format=fmt)


def load_binding_table(bindings_path: Path | None) -> BindingTable:
    """Merge config-file and ``--bindings`` overrides over the default table."""
    table = default_binding_table(config.load_keybindings())
    if bindings_path is not None:
        table = table.merged(config.load_keybindings(bindings_path))
    return table


def save_defaults(args: argparse.Namespace) -> None:
    """Write the options given on this command line into the config file."""
    if args.bindings:
        overrides = config.load_keybindings()
        overrides.update(config.load_keybindings(Path(args.bindings)))
        config.save_keybindings(overrides)
    if args.ignore_case is not None:
        config.save_ignore_case(args.ignore_case)
    if args.window_height is not None:
        config.save_window_height(args.window_height)


def _describe(value: Any) -> Any:
    if isinstance(value, TreeNode):
        return value.name()
    if isinstance(value, Command):
        return value.to_dict()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, list):
        return [_describe(item) for item in value]
    return value


def event_to_json(event: Event) -> str:
    payload: dict[str, Any] = {"event": event.name}
    for key, value in event.data.items():
        if key == "keypress":
            continue
        payload[key] = _describe(value)
    return json.dumps(payload, sort_keys=True)


def attach_printer(session: NavigationSession, out: TextIO, line_end: str = "\n") -> None:
    """Subscribe a listener that writes printable session events to ``out``."""

    def write(event: Event) -> None:
        out.write(event_to_json(event) + line_end)
        out.flush()

    for name in PRINTED_EVENTS:
        session.on(name, write)


def run_session(session: NavigationSession, reader: KeyReader, out: TextIO, line_end: str = "\n") -> None:
    """Feed keypresses from ``reader`` to ``session`` until quit or end of input."""
    attach_printer(session, out, line_end)
    while True:
        keypress = reader.read()
        if keypress is None:
            break
        token = canonicalize(keypress)
        if token in QUIT_TOKENS and not session.pending_input and not session.engine.is_reading:
            break
        session.handle_keypress(keypress)
    session.close()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run an interactive session on a directory."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_file, args.debug)

    try:
        table = load_binding_table(Path(args.bindings) if args.bindings else None)
    except BindingConfigError as exc:
        parser.exit(2, f"vats: invalid keybindings: {exc}\n")

    if args.save:
        save_defaults(args)

    if args.list_bindings:
        sys.stdout.write(json.dumps(table.to_config(), indent=2) + "\n")
        return

    path = Path(args.path) if args.path else Path.cwd()
    if not path.is_dir():
        raise SystemExit(f"Not a directory: {path}")
    if not sys.stdin.isatty():
        raise SystemExit("vats needs an interactive terminal on stdin.")

    window_height = args.window_height or config.load_window_height()
    ignore_case = args.ignore_case if args.ignore_case is not None else config.load_ignore_case()
    root = build_directory_tree(path, max_depth=args.depth, show_hidden=args.hidden)
    session = NavigationSession(root, window_height=window_height, table=table, ignore_case=ignore_case)
    if args.search:
        session.search(args.search)

    fd = sys.stdin.fileno()
    terminal = TerminalController(fd)
    logger.info("starting session on %s (%d bindings)", path, len(table))
    with terminal.raw_mode():
        # Raw mode disables output post-processing, so lines need explicit CR.
        run_session(session, KeyReader(fd), sys.stdout, line_end="\r\n")


if __name__ == "__main__":
    main()
