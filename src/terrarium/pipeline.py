"""Bundling pipeline.

State machine (strictly sequential, one per invocation):

    init -> cache-ready -> base-installed -> discovered -> missing-installed
         -> finalized -> (styled | unstyled) -> done

Any stage may raise; `BundlePipeline.run()` is the single place that catches,
classifies and returns a `BuildFailure`. A failure is terminal and never comes
with a partial script. Only the style stage degrades instead of failing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from terrarium.cache.store import CacheStore
from terrarium.config import BundlerConfig
from terrarium.core.classify import classify
from terrarium.core.errors import EntryNotFoundError, InstallError
from terrarium.core.model import BuildFailure, BuildResult, BuildSuccess
from terrarium.engine.discovery import DiscoveryPass
from terrarium.engine.finalize import FinalizePass
from terrarium.engine.harness import build_harness
from terrarium.engine.installer import DependencyInstaller
from terrarium.engine.styles import StyleSynthesizer, apply_styles
from terrarium.engine.toolchain import Runner, Toolchain, run_command

logger = logging.getLogger(__name__)

INIT = "init"
CACHE_READY = "cache-ready"
BASE_INSTALLED = "base-installed"
DISCOVERED = "discovered"
MISSING_INSTALLED = "missing-installed"
FINALIZED = "finalized"
STYLED = "styled"
UNSTYLED = "unstyled"
DONE = "done"

INSTALL_STARTED = "install-started"
INSTALL_FINISHED = "install-finished"

EventSink = Callable[[str], None]


class BundlePipeline:
    def __init__(
        self,
        config: BundlerConfig,
        *,
        toolchain: Toolchain | None = None,
        runner: Runner = run_command,
        on_event: EventSink | None = None,
    ) -> None:
        self.config = config
        self.cache = CacheStore(config.cache_dir)
        self._toolchain = toolchain
        self._runner = runner
        self._on_event = on_event
        self.state = INIT

    def _advance(self, state: str) -> None:
        logger.debug("Pipeline: %s -> %s", self.state, state)
        self.state = state

    def _emit(self, event: str) -> None:
        if self._on_event is not None:
            self._on_event(event)

    def run(self, entry: str | Path) -> BuildResult:
        self.state = INIT
        try:
            script, styled = self._run(Path(entry))
        except Exception as e:
            envelope = classify(e)
            headline = envelope.message.splitlines()[0] if envelope.message else ""
            logger.error("Bundle failed (%s, stage=%s): %s", envelope.type, self.state, headline)
            return BuildFailure(envelope=envelope, stage=self.state)
        self._advance(DONE)
        return BuildSuccess(script=script, styled=styled)

    def _run(self, entry: Path) -> tuple[str, bool]:
        self.cache.ensure()
        self._advance(CACHE_READY)

        resolved = entry.expanduser().resolve()
        if not resolved.is_file():
            raise EntryNotFoundError(f"File not found: {resolved}")

        toolchain = self._toolchain or Toolchain.discover(self.config.node, runner=self._runner)
        installer = DependencyInstaller(self.cache, toolchain, self.config)

        first_run = self.cache.needs_install()
        if first_run:
            self._emit(INSTALL_STARTED)
        try:
            installer.install_base()
        finally:
            if first_run:
                self._emit(INSTALL_FINISHED)
        self._advance(BASE_INSTALLED)

        missing = DiscoveryPass(self.cache, toolchain, self.config).discover(resolved)
        self._advance(DISCOVERED)

        installer.install_missing(missing)
        still_missing = [n for n in missing if not self.cache.is_installed(n)]
        if still_missing:
            raise InstallError(
                f"Packages still missing after install: {' '.join(still_missing)}",
                packages=still_missing,
            )
        self._advance(MISSING_INSTALLED)

        harness = build_harness(resolved)
        script = FinalizePass(self.cache, toolchain, self.config).finalize(harness, resolved)
        self._advance(FINALIZED)

        if not self.config.styles:
            self._advance(UNSTYLED)
            return script, False

        outcome = StyleSynthesizer(self.cache, toolchain, self.config).synthesize(script)
        if not outcome.ok:
            logger.warning("Style generation failed, continuing without styles: %s", outcome.error)
            self._advance(UNSTYLED)
            return script, False
        self._advance(STYLED)
        return apply_styles(script, outcome), True


def bundle(
    entry: str | Path,
    config: BundlerConfig | None = None,
    *,
    runner: Runner = run_command,
    on_event: EventSink | None = None,
) -> BuildResult:
    """Bundle `entry` into a self-mounting browser script (or a classified failure)."""
    cfg = BundlerConfig.from_env() if config is None else config
    return BundlePipeline(cfg, runner=runner, on_event=on_event).run(entry)
