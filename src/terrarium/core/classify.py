"""Error classification: any failure -> stable ErrorEnvelope.

Classification order (first match wins):
1. An explicit type attached by a lower layer (`BundleError.error_type`).
2. Ordered rule table `RULES` of (predicate, type) pairs:
   syntax -> resolve -> network -> build -> unknown.

Marker lists are plain module-level tuples so they can be tested and swapped
independently of the control flow.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable
from urllib.parse import unquote

from terrarium.core.errors import BundleError
from terrarium.core.model import (
    BUILD,
    ERROR_TYPES,
    NETWORK,
    RESOLVE,
    SYNTAX,
    UNKNOWN,
    Diagnostic,
    ErrorEnvelope,
    is_bare_specifier,
    package_name,
)

SYNTAX_MARKERS: tuple[str, ...] = (
    "Expected ",
    "Unexpected ",
    "Unterminated ",
    "Syntax error",
    "is not valid inside a JSX element",
    "Invalid assignment target",
)

RESOLVE_MARKERS: tuple[str, ...] = (
    "Could not resolve",
    "Cannot find module",
    "Module not found",
    "is not in this registry",
    "is not in the npm registry",
    "E404",
    "404 Not Found",
    "No matching version found",
)

PACKAGE_MANAGER_MARKERS: tuple[str, ...] = (
    "npm ERR!",
    "npm error",
)

NETWORK_MARKERS: tuple[str, ...] = (
    "ENOTFOUND",
    "EAI_AGAIN",
    "ENETUNREACH",
    "EHOSTUNREACH",
    "ETIMEDOUT",
    "ECONNREFUSED",
    "ECONNRESET",
    "getaddrinfo",
    "network request",
    "socket hang up",
)

_UNRESOLVED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r'Could not resolve "([^"]+)"'),
    re.compile(r"Cannot find module '([^']+)'"),
    re.compile(r"'((?:@[^/'\s]+/)?[^@'\s]+)(?:@[^']*)?' is not in (?:this|the npm) registry"),
    re.compile(r"404 Not Found - GET https?://\S+?/(@[^/\s]+%2[fF][^/\s]+|[^/\s@][^/\s]*)(?:\s|$)"),
    re.compile(r"No matching version found for ((?:@[^/\s]+/)?[^@\s]+)@"),
)


def contains_any(text: str, markers: Iterable[str]) -> bool:
    return any(m in text for m in markers)


def unresolved_package(text: str) -> str | None:
    """Extract the package name an unresolved-module message refers to.

    Returns None when no pattern matches or the unresolved path is a project file.
    """
    for pat in _UNRESOLVED_PATTERNS:
        m = pat.search(text)
        if not m:
            continue
        spec = unquote(m.group(1))
        if is_bare_specifier(spec):
            return package_name(spec)
        return None
    return None


@dataclass(frozen=True)
class FailureText:
    """The searchable text of a failure."""

    message: str
    diagnostics: tuple[str, ...] = ()

    @property
    def all_text(self) -> tuple[str, ...]:
        return (self.message, *self.diagnostics)


Predicate = Callable[[FailureText], bool]


@dataclass(frozen=True)
class Rule:
    error_type: str
    predicate: Predicate
    name: str = ""

    def __post_init__(self) -> None:
        if self.error_type not in ERROR_TYPES:
            raise ValueError(f"Rule.error_type: unknown type {self.error_type!r}")


def diagnostic_contains(markers: tuple[str, ...]) -> Predicate:
    return lambda f: any(contains_any(d, markers) for d in f.diagnostics)


def any_text_contains(markers: tuple[str, ...]) -> Predicate:
    return lambda f: any(contains_any(t, markers) for t in f.all_text)


def message_contains(markers: tuple[str, ...]) -> Predicate:
    return lambda f: contains_any(f.message, markers)


def has_diagnostics(f: FailureText) -> bool:
    return bool(f.diagnostics)


RULES: tuple[Rule, ...] = (
    Rule(SYNTAX, diagnostic_contains(SYNTAX_MARKERS), "parse-failure"),
    Rule(RESOLVE, any_text_contains(RESOLVE_MARKERS), "unresolved-module"),
    Rule(NETWORK, message_contains(PACKAGE_MANAGER_MARKERS + NETWORK_MARKERS), "package-manager"),
    Rule(BUILD, has_diagnostics, "diagnostics"),
    Rule(UNKNOWN, lambda f: True, "fallback"),
)


def _diagnostics_of(exc: BaseException) -> tuple[Diagnostic, ...]:
    if isinstance(exc, BundleError):
        return exc.diagnostics
    return ()


def _message_of(exc: BaseException) -> str:
    if isinstance(exc, BundleError):
        return exc.message
    msg = str(exc)
    return msg if msg else type(exc).__name__


def classify_text(failure: FailureText, rules: Iterable[Rule] = RULES) -> str:
    for rule in rules:
        if rule.predicate(failure):
            return rule.error_type
    return UNKNOWN


def classify(exc: BaseException, *, rules: Iterable[Rule] = RULES) -> ErrorEnvelope:
    """Map any exception to the closed taxonomy and wrap it in an envelope."""
    diagnostics = _diagnostics_of(exc)
    message = _message_of(exc)

    explicit = getattr(exc, "error_type", None) if isinstance(exc, BundleError) else None
    if explicit is not None:
        return ErrorEnvelope(type=explicit, message=message, diagnostics=diagnostics)

    failure = FailureText(message=message, diagnostics=tuple(d.text for d in diagnostics))
    return ErrorEnvelope(type=classify_text(failure, rules), message=message, diagnostics=diagnostics)
