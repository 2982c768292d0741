"""Main entry point for running kalkulus_pkg as a module.

This allows running Kalkulus with:
    python -m kalkulus_pkg
    python -m kalkulus_pkg -e "diff x^2"
    python -m kalkulus_pkg --set x=2 -e "3x + 1"

This is equivalent to running the ``kalkulus`` console script.
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
