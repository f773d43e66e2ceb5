"""Dependency cache on disk.

A cache is a folder (default `~/.terrarium/`) containing:
- package.json     minimal private manifest, written once
- node_modules/    packages installed by npm
- .install.lock    inter-process lock serializing installs

A package counts as installed iff `node_modules/<package name>` is a directory.
The store is shared and long-lived across invocations; it is created lazily and
never cleaned up here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from filelock import FileLock

from terrarium.core.model import package_name

from .manifest import MANIFEST_NAME, build_manifest, write_manifest

logger = logging.getLogger(__name__)

LOCK_NAME = ".install.lock"

# First-run marker: the rendering framework is the first thing ever installed.
_FIRST_RUN_PACKAGE = "react"


class CacheStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"CacheStore({str(self.root)!r})"

    @property
    def node_modules(self) -> Path:
        return self.root / "node_modules"

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME

    def ensure(self) -> Path:
        """Create the cache tree and manifest if absent. Safe to call every run."""
        self.root.mkdir(parents=True, exist_ok=True)
        if not self.manifest_path.exists():
            logger.debug("Writing cache manifest %s", self.manifest_path)
            write_manifest(self.manifest_path, build_manifest())
        return self.root

    def package_dir(self, specifier: str) -> Path:
        # Scoped names map to two path segments: node_modules/@scope/pkg
        return self.node_modules.joinpath(*package_name(specifier).split("/"))

    def is_installed(self, specifier: str) -> bool:
        return self.package_dir(specifier).is_dir()

    def needs_install(self) -> bool:
        return not self.is_installed(_FIRST_RUN_PACKAGE)

    def install_lock(self, timeout: float = -1) -> FileLock:
        """Lock serializing installs into this cache across processes."""
        return FileLock(str(self.root / LOCK_NAME), timeout=timeout)
