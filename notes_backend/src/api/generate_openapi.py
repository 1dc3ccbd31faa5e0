"""
Write the OpenAPI schema of the notes API to disk.

Serializes the schema of a freshly built application to interfaces/openapi.json
so frontend clients and documentation tools can use it without a running
server. No data file is opened: the store is only created at startup.

Usage:
    python -m src.api.generate_openapi [output-path]
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from .main import create_app, openapi_tags

logger = logging.getLogger(__name__)


def default_output_path() -> str:
    """<container_root>/interfaces/openapi.json"""
    src_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    return os.path.join(os.path.dirname(src_dir), "interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Add any tag from `openapi_tags` missing from the schema's tag metadata.
    Existing definitions are left alone.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema file and return the path written."""
    schema = create_app().openapi()
    _ensure_tags(schema)

    path = out_path or default_output_path()
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    logger.info("Wrote OpenAPI schema to %s", path)
    return path


if __name__ == "__main__":
    print(generate_openapi(sys.argv[1] if len(sys.argv) > 1 else None))
