"""Terrarium core: data model, exceptions and error classification.

This package is standalone and must not import cache/engine/cli to avoid
circular dependencies.
"""

from __future__ import annotations

from .classify import RULES, Rule, classify, unresolved_package
from .errors import (
    BundleError,
    CompileError,
    DriverProtocolError,
    EntryNotFoundError,
    InstallError,
    NetworkError,
    ToolchainError,
)
from .model import (
    BUILD,
    ERROR_TYPES,
    NETWORK,
    RESOLVE,
    SYNTAX,
    UNKNOWN,
    BuildFailure,
    BuildResult,
    BuildSuccess,
    Diagnostic,
    ErrorEnvelope,
    is_bare_specifier,
    missing_set,
    package_name,
)

__all__ = [
    "BUILD",
    "ERROR_TYPES",
    "NETWORK",
    "RESOLVE",
    "SYNTAX",
    "UNKNOWN",
    "BuildFailure",
    "BuildResult",
    "BuildSuccess",
    "Diagnostic",
    "ErrorEnvelope",
    "is_bare_specifier",
    "missing_set",
    "package_name",
    "BundleError",
    "CompileError",
    "DriverProtocolError",
    "EntryNotFoundError",
    "InstallError",
    "NetworkError",
    "ToolchainError",
    "RULES",
    "Rule",
    "classify",
    "unresolved_package",
]
