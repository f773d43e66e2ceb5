"""Bundling stages driving node, npm, esbuild and UnoCSS."""

from __future__ import annotations

from .discovery import DiscoveryPass
from .finalize import FinalizePass
from .harness import build_harness
from .installer import DependencyInstaller, base_packages
from .styles import StyleOutcome, StyleSynthesizer, apply_styles
from .toolchain import CommandResult, Toolchain, run_command

__all__ = [
    "CommandResult",
    "DependencyInstaller",
    "DiscoveryPass",
    "FinalizePass",
    "StyleOutcome",
    "StyleSynthesizer",
    "Toolchain",
    "apply_styles",
    "base_packages",
    "build_harness",
    "run_command",
]
