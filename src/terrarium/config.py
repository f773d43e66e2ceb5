"""Bundler configuration.

A single frozen `BundlerConfig` value is passed explicitly into every component.
The environment is only consulted by `BundlerConfig.from_env()`, which the CLI
calls once at its boundary.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

CACHE_DIR_ENV = "TERRARIUM_CACHE_DIR"
NODE_ENV = "TERRARIUM_NODE"
DEFAULT_CACHE_DIRNAME = ".terrarium"

INSTALL_TIMEOUT_S = 120.0
COMPILE_TIMEOUT_S = 120.0
LOCK_TIMEOUT_S = 300.0

# Package names driven by the pipeline.
COMPILER_PACKAGES: tuple[str, ...] = ("esbuild",)
FRAMEWORK_PACKAGES: tuple[str, ...] = ("react", "react-dom")
STYLE_PACKAGES: tuple[str, ...] = ("@unocss/core", "@unocss/preset-uno", "@unocss/reset")


def default_cache_dir() -> Path:
    return Path.home() / DEFAULT_CACHE_DIRNAME


@dataclass(frozen=True)
class BundlerConfig:
    cache_dir: Path
    styles: bool = True
    node: Path | None = None
    install_timeout: float = INSTALL_TIMEOUT_S
    compile_timeout: float = COMPILE_TIMEOUT_S
    lock_timeout: float = LOCK_TIMEOUT_S

    def __post_init__(self) -> None:
        object.__setattr__(self, "cache_dir", Path(self.cache_dir).expanduser())
        if self.node is not None:
            object.__setattr__(self, "node", Path(self.node).expanduser())
        for name in ("install_timeout", "compile_timeout", "lock_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"BundlerConfig.{name}: must be positive")

    @property
    def node_modules(self) -> Path:
        return self.cache_dir / "node_modules"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides: Any) -> "BundlerConfig":
        """Build a config from environment variables, then apply keyword overrides."""
        env = os.environ if env is None else env
        cache_dir = env.get(CACHE_DIR_ENV) or default_cache_dir()
        node = env.get(NODE_ENV) or None
        cfg = cls(cache_dir=Path(cache_dir), node=Path(node) if node else None)
        return replace(cfg, **overrides) if overrides else cfg
