"""Style synthesizer (best effort).

The final script text is used as a plain-text corpus: utility class names
written as string literals survive compilation, so the atomic-CSS generator can
pick them up. On success a small IIFE is prepended that (re)injects the CSS as
`<style id="terrarium-styles">` in `document.head`.

This stage never raises. Failures are returned as a `StyleOutcome` with an
`error`, logged by the caller, and the script is left byte-identical.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from terrarium.cache.store import CacheStore
from terrarium.config import BundlerConfig

from .drivers import STYLES, parse_answer, render_driver
from .toolchain import Toolchain

logger = logging.getLogger(__name__)

STYLE_ELEMENT_ID = "terrarium-styles"


@dataclass(frozen=True)
class StyleOutcome:
    css: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.css is not None


def injection_snippet(css: str) -> str:
    """Self-contained IIFE replacing any previously injected style element."""
    return (
        "(function () {\n"
        f"  var id = {json.dumps(STYLE_ELEMENT_ID)};\n"
        "  var previous = document.getElementById(id);\n"
        "  if (previous) previous.remove();\n"
        "  var style = document.createElement('style');\n"
        "  style.id = id;\n"
        f"  style.textContent = {json.dumps(css)};\n"
        "  document.head.appendChild(style);\n"
        "})();\n"
    )


def apply_styles(script: str, outcome: StyleOutcome) -> str:
    if not outcome.ok:
        return script
    return injection_snippet(outcome.css or "") + script


class StyleSynthesizer:
    def __init__(self, cache: CacheStore, toolchain: Toolchain, config: BundlerConfig) -> None:
        self.cache = cache
        self.toolchain = toolchain
        self.config = config

    def driver_source(self, corpus: str) -> str:
        return render_driver(STYLES, {"corpus": corpus, "nodeModules": str(self.cache.node_modules)})

    def synthesize(self, script: str) -> StyleOutcome:
        try:
            result = self.toolchain.run_node(
                self.driver_source(script),
                cwd=self.cache.root,
                timeout=self.config.compile_timeout,
            )
            answer = parse_answer(result, kind=STYLES)
            css = answer.get("css")
            if not isinstance(css, str):
                return StyleOutcome(error="styles driver: 'css' must be a string")
            return StyleOutcome(css=css)
        except Exception as e:  # best effort: every failure becomes an outcome
            return StyleOutcome(error=f"{type(e).__name__}: {e}")
