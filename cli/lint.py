"""CLI wrapper: Lint the package, tests and CLI wrappers."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "ruff", "check", "gc_policy", "tests", "cli", *sys.argv[1:]])
