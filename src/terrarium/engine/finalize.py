"""Finalize pass: compile the harness into the deliverable script.

The harness text (not the user's file) is the program input, fed as in-memory
stdin with the entry's directory as the resolution root. Output is a single
unminified browser IIFE without a source map, held in memory. Any compiler
error here fails the whole run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from terrarium.cache.store import CacheStore
from terrarium.config import BundlerConfig
from terrarium.core.errors import CompileError, DriverProtocolError

from .drivers import FINALIZE, parse_answer, render_driver
from .toolchain import Toolchain

logger = logging.getLogger(__name__)

HARNESS_SOURCEFILE = "terrarium-entry.tsx"


class FinalizePass:
    def __init__(self, cache: CacheStore, toolchain: Toolchain, config: BundlerConfig) -> None:
        self.cache = cache
        self.toolchain = toolchain
        self.config = config

    def driver_source(self, harness: str, entry: Path) -> str:
        return render_driver(
            FINALIZE,
            {
                "harness": harness,
                "resolveDir": str(Path(entry).parent),
                "sourcefile": HARNESS_SOURCEFILE,
                "nodeModules": str(self.cache.node_modules),
            },
        )

    def finalize(self, harness: str, entry: Path) -> str:
        result = self.toolchain.run_node(
            self.driver_source(harness, entry),
            cwd=self.cache.root,
            timeout=self.config.compile_timeout,
        )
        answer = parse_answer(result, kind=FINALIZE)
        text = answer.get("text")
        if not isinstance(text, str):
            raise DriverProtocolError("finalize driver: 'text' must be a string")
        if not text.strip():
            raise CompileError("Build produced an empty script")
        logger.debug("Finalized %s (%d chars)", entry, len(text))
        return text
