"""Dependency installer: batched `npm install` into the cache.

One installer is created per bundling run. It guarantees:
- a package name is requested from npm at most once per run;
- an empty (or fully satisfied) batch never invokes npm;
- a failing batch aborts the run: network failures are raised as NetworkError
  (explicit `network` type), anything else as InstallError for the classifier.

No retries.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Iterable

from terrarium.cache.store import CacheStore
from terrarium.config import COMPILER_PACKAGES, FRAMEWORK_PACKAGES, STYLE_PACKAGES, BundlerConfig
from terrarium.core.classify import NETWORK_MARKERS, contains_any
from terrarium.core.errors import InstallError, NetworkError
from terrarium.core.model import missing_set

from .toolchain import Toolchain

logger = logging.getLogger(__name__)

NPM_INSTALL_FLAGS: tuple[str, ...] = ("--no-audit", "--no-fund", "--loglevel=error")


def base_packages(*, styles: bool = True) -> tuple[str, ...]:
    """Baseline every bundle needs: compiler, framework and (optionally) style engine."""
    names = COMPILER_PACKAGES + FRAMEWORK_PACKAGES
    if styles:
        names = names + STYLE_PACKAGES
    return names


class DependencyInstaller:
    def __init__(self, cache: CacheStore, toolchain: Toolchain, config: BundlerConfig) -> None:
        self.cache = cache
        self.toolchain = toolchain
        self.config = config
        self._requested: set[str] = set()
        self.invocations = 0  # npm processes started

    def is_installed(self, name: str) -> bool:
        return self.cache.is_installed(name)

    def pending(self, names: Iterable[str]) -> tuple[str, ...]:
        """Names from `names` that still need installing in this run."""
        return tuple(n for n in missing_set(names) if n not in self._requested and not self.is_installed(n))

    def install_base(self, *, styles: bool | None = None) -> tuple[str, ...]:
        styles = self.config.styles if styles is None else styles
        return self.install(base_packages(styles=styles))

    def install_missing(self, names: Iterable[str]) -> tuple[str, ...]:
        return self.install(names)

    def install(self, names: Iterable[str]) -> tuple[str, ...]:
        """Install all of `names` that are missing, as a single npm batch.

        Returns the names actually passed to npm (empty if nothing was needed).
        """
        batch = self.pending(names)
        if not batch:
            return ()

        with self.cache.install_lock(timeout=self.config.lock_timeout):
            # Another process may have installed some of them while we waited.
            batch = self.pending(batch)
            if not batch:
                return ()
            self._requested.update(batch)
            self._run_npm(batch)
        return batch

    def _run_npm(self, batch: tuple[str, ...]) -> None:
        logger.info("Installing: %s", " ".join(batch))
        self.invocations += 1
        args = ["install", "--prefix", str(self.cache.root), *NPM_INSTALL_FLAGS, *batch]
        try:
            result = self.toolchain.run_npm(args, cwd=self.cache.root, timeout=self.config.install_timeout)
        except subprocess.TimeoutExpired as e:
            raise NetworkError(
                f"npm install timed out after {self.config.install_timeout:g}s: {' '.join(batch)}",
                packages=batch,
            ) from e

        if result.ok:
            return

        output = result.output
        tail = output.strip()[-1500:]
        if contains_any(output, NETWORK_MARKERS):
            raise NetworkError(
                f"Network error while installing {' '.join(batch)}:\n{tail}",
                packages=batch,
                output=output,
            )
        raise InstallError(
            f"npm install failed for {' '.join(batch)} (exit {result.returncode}):\n{tail}",
            packages=batch,
            output=output,
        )
