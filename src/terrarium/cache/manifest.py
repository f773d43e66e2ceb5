"""Cache manifest (`package.json`) utilities.

This module is intentionally small and dependency-light. It provides:
- a minimal manifest builder for the cache's private npm project
- package.json read/write

The manifest only exists so `npm install --prefix <cache>` has a project to
install into. Installed state is never derived from its contents.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

MANIFEST_NAME = "package.json"
CACHE_PROJECT_NAME = "terrarium-cache"


def build_manifest(*, name: str = CACHE_PROJECT_NAME) -> dict[str, Any]:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("manifest: name must be a non-empty string")
    return {"name": name.strip(), "private": True}


def read_manifest(path: Path) -> dict[str, Any]:
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(obj, dict):
        raise ValueError(f"{MANIFEST_NAME}: expected JSON object")
    return obj


def write_manifest(path: Path, manifest: dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(manifest, indent=2) + "\n"
    p.write_text(text, encoding="utf-8")
