"""Module entrypoint for ``python -m vats``.

Argument parsing and terminal setup happen in ``vats.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
