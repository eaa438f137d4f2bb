"""CLI wrapper: Format code and sort imports."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "ruff", "format", "gc_policy", "tests", "cli", *sys.argv[1:]])
