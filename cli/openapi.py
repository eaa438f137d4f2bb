"""CLI wrapper: Generate the OpenAPI schema of the GC policy API."""

from __future__ import annotations

import json
import sys
from pathlib import Path

DEFAULT_OUTPUT = Path("docs") / "openapi.json"


def write_openapi(output_file: Path = DEFAULT_OUTPUT) -> dict:
    """
    Render the application's OpenAPI schema to a JSON file.

    Returns:
        The schema that was written
    """
    from gc_policy.main import create_app

    openapi_schema = create_app().openapi()

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(openapi_schema, f, indent=2)
        f.write("\n")

    return openapi_schema


def main() -> None:
    output_file = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_OUTPUT
    openapi_schema = write_openapi(output_file)

    print(f"[OK] OpenAPI schema generated: {output_file}")
    print(f"   Title: {openapi_schema['info']['title']}")
    print(f"   Version: {openapi_schema['info']['version']}")
    print(f"   Endpoints: {len(openapi_schema['paths'])} paths")

    for path, methods in openapi_schema["paths"].items():
        for method, details in methods.items():
            tags = details.get("tags", [""])
            summary = details.get("summary", "No summary")
            print(f"   {method.upper():6} {path:45} [{tags[0]}] {summary}")
