"""Core data model for the Terrarium bundler.

Scope:
- Package specifier -> package name resolution (scoped names, sub-paths, versions).
- Standalone dataclasses for diagnostics, error envelopes and build results.
- Does NOT run any subprocess or touch the filesystem.

This module must not import cache/engine/cli.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Iterable, Union

# Closed error taxonomy.
SYNTAX = "syntax"
RESOLVE = "resolve"
NETWORK = "network"
BUILD = "build"
UNKNOWN = "unknown"

ERROR_TYPES = (SYNTAX, RESOLVE, NETWORK, BUILD, UNKNOWN)

# Import schemes that never name an npm package.
_URL_SCHEMES = ("node:", "http:", "https:", "data:", "file:")


def _norm_specifier(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"package specifier: expected str, got {type(value).__name__}")
    s = value.strip()
    if not s:
        raise ValueError("package specifier: must be a non-empty string")
    return s


def is_bare_specifier(specifier: str) -> bool:
    """Return True if `specifier` names an external package.

    Relative (`./x`, `../x`) and absolute (`/x`) paths are project files; URL-scheme
    imports (`node:fs`, `https://...`) are left to the compiler.
    """
    s = _norm_specifier(specifier)
    if s.startswith((".", "/")):
        return False
    return not s.lower().startswith(_URL_SCHEMES)


def package_name(specifier: str) -> str:
    """Resolve an import specifier to the npm package name it installs as.

    Examples:
      - "react-dom/client"        -> "react-dom"
      - "@scope/pkg/sub/path"     -> "@scope/pkg"
      - "lodash@4.17.21"          -> "lodash"
      - "@scope/pkg@1.2.0/sub"    -> "@scope/pkg"
    """
    s = _norm_specifier(specifier)
    if s.startswith("@"):
        parts = s.split("/")
        name = "/".join(parts[:2])
        # Version qualifier can only follow the scope: "@scope/pkg@1.0".
        at = name.find("@", 1)
        return name[:at] if at > 0 else name
    return s.split("/")[0].split("@")[0]


def missing_set(names: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate package names, keeping first-seen order."""
    seen: dict[str, None] = {}
    for n in names:
        seen.setdefault(package_name(n), None)
    return tuple(seen)


@dataclass(frozen=True)
class Diagnostic:
    """One compiler message, in the shape esbuild reports it."""

    text: str
    file: str | None = None
    line: int | None = None
    column: int | None = None
    line_text: str | None = None

    @classmethod
    def from_message(cls, obj: Any) -> "Diagnostic":
        """Build from an esbuild message object (or a bare string)."""
        if isinstance(obj, str):
            return cls(text=obj)
        if not isinstance(obj, dict):
            return cls(text=str(obj))
        loc = obj.get("location") or {}
        if not isinstance(loc, dict):
            loc = {}
        return cls(
            text=str(obj.get("text", "")),
            file=loc.get("file"),
            line=loc.get("line"),
            column=loc.get("column"),
            line_text=loc.get("lineText"),
        )

    def to_dict(self) -> dict[str, Any]:
        location = None
        if self.file is not None or self.line is not None:
            location = {
                "file": self.file,
                "line": self.line,
                "column": self.column,
                "lineText": self.line_text,
            }
        return {"text": self.text, "location": location}

    def __str__(self) -> str:
        if self.file and self.line is not None:
            return f"{self.file}:{self.line}:{self.column or 0}: {self.text}"
        return self.text


@dataclass(frozen=True)
class ErrorEnvelope:
    """Stable failure payload handed to callers in place of a script."""

    type: str
    message: str
    diagnostics: tuple[Diagnostic, ...] = ()

    def __post_init__(self) -> None:
        if self.type not in ERROR_TYPES:
            raise ValueError(f"ErrorEnvelope.type: expected one of {list(ERROR_TYPES)}, got {self.type!r}")
        object.__setattr__(self, "message", str(self.message))
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": True,
            "type": self.type,
            "message": self.message,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class BuildSuccess:
    script: str
    styled: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class BuildFailure:
    envelope: ErrorEnvelope
    # Last pipeline state reached before the failure.
    stage: str = field(default="init")

    @property
    def ok(self) -> bool:
        return False


BuildResult = Union[BuildSuccess, BuildFailure]
