"""Discovery pass: a detect-only compilation listing missing packages.

The compiler is run over the entry file with a resolution hook that marks every
bare import whose package is absent from the cache as external (so compilation
continues) and records it. The pass reads the cache but never writes to it and
never installs anything; for a fixed cache state it is deterministic.
"""

from __future__ import annotations

import logging
from pathlib import Path

from terrarium.cache.store import CacheStore
from terrarium.config import BundlerConfig
from terrarium.core.errors import DriverProtocolError
from terrarium.core.model import is_bare_specifier, missing_set

from .drivers import DISCOVER, parse_answer, render_driver
from .toolchain import Toolchain

logger = logging.getLogger(__name__)


class DiscoveryPass:
    def __init__(self, cache: CacheStore, toolchain: Toolchain, config: BundlerConfig) -> None:
        self.cache = cache
        self.toolchain = toolchain
        self.config = config

    def driver_source(self, entry: Path) -> str:
        return render_driver(
            DISCOVER,
            {"entry": str(entry), "nodeModules": str(self.cache.node_modules)},
        )

    def discover(self, entry: Path) -> tuple[str, ...]:
        """Return the MissingSet for `entry` (absolute path), sorted.

        esbuild runs resolve callbacks concurrently, so the driver reports
        specifiers in no stable order.
        """
        result = self.toolchain.run_node(
            self.driver_source(entry),
            cwd=self.cache.root,
            timeout=self.config.compile_timeout,
        )
        answer = parse_answer(result, kind=DISCOVER)

        specifiers = answer.get("specifiers", [])
        if not isinstance(specifiers, list) or not all(isinstance(s, str) for s in specifiers):
            raise DriverProtocolError("discover driver: 'specifiers' must be a list of strings")

        bare = [s for s in specifiers if s.strip() and is_bare_specifier(s)]
        missing = tuple(sorted(n for n in missing_set(bare) if not self.cache.is_installed(n)))
        if missing:
            logger.info("Missing packages: %s", " ".join(missing))
        else:
            logger.debug("No missing packages for %s", entry)
        return missing
