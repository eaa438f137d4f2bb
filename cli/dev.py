"""CLI wrapper: Start the GC policy service with auto-reload."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run(
        [
            sys.executable,
            "-m",
            "uvicorn",
            "gc_policy.main:app",
            "--reload",
            "--port",
            "8000",
            *sys.argv[1:],
        ]
    )
