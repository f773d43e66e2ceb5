"""Terrarium: just-in-time bundler for single component files.

Given one `.tsx`/`.jsx` file, Terrarium installs the npm packages it needs into
a shared cache, compiles it into a self-mounting browser script, optionally
injects utility styles, and reports any failure as a classified error envelope.
"""

from __future__ import annotations

from terrarium.config import BundlerConfig
from terrarium.core import BuildFailure, BuildResult, BuildSuccess, ErrorEnvelope
from terrarium.pipeline import BundlePipeline, bundle

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BuildFailure",
    "BuildResult",
    "BuildSuccess",
    "BundlePipeline",
    "BundlerConfig",
    "ErrorEnvelope",
    "bundle",
]
