"""Exception hierarchy raised by the bundling stages.

Every stage either returns data or raises one of these (or lets an OSError
through). Only `terrarium.core.classify` turns them into an ErrorEnvelope.
"""

from __future__ import annotations

from typing import Iterable

from terrarium.core.model import NETWORK, Diagnostic


class BundleError(Exception):
    """Base failure carrying an optional pre-attached error type.

    Attributes:
        error_type: taxonomy type decided by a lower layer, or None to let the
            classifier decide.
        diagnostics: compiler messages, if any.
        packages: package names involved (install failures).
    """

    error_type: str | None = None

    def __init__(
        self,
        message: str,
        *,
        error_type: str | None = None,
        diagnostics: Iterable[Diagnostic] = (),
        packages: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_type is not None:
            self.error_type = error_type
        self.diagnostics = tuple(diagnostics)
        self.packages = tuple(packages)


class EntryNotFoundError(BundleError):
    """The entry file does not exist."""


class ToolchainError(BundleError):
    """node/npm could not be located or started."""


class DriverProtocolError(BundleError):
    """A driver program exited without a parseable JSON answer."""


class InstallError(BundleError):
    """`npm install` failed for a reason not recognized as a network failure."""

    def __init__(self, message: str, *, packages: Iterable[str] = (), output: str = "", **kwargs) -> None:
        super().__init__(message, packages=packages, **kwargs)
        self.output = output


class NetworkError(InstallError):
    """The package manager could not reach its registry."""

    error_type = NETWORK


class CompileError(BundleError):
    """The compiler engine reported errors."""
