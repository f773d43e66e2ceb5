from __future__ import annotations

import json

import pytest

from terrarium.core.model import (
    BuildFailure,
    BuildSuccess,
    Diagnostic,
    ErrorEnvelope,
    is_bare_specifier,
    missing_set,
    package_name,
)


@pytest.mark.parametrize(
    "specifier, expected",
    [
        ("react", "react"),
        ("react-dom/client", "react-dom"),
        ("lodash@4.17.21", "lodash"),
        ("lodash/fp/map", "lodash"),
        ("@scope/pkg", "@scope/pkg"),
        ("@scope/pkg/sub/path", "@scope/pkg"),
        ("@scope/pkg@1.2.0", "@scope/pkg"),
        ("@scope/pkg@1.2.0/sub", "@scope/pkg"),
        ("  framer-motion  ", "framer-motion"),
    ],
)
def test_package_name_strips_subpath_and_version(specifier: str, expected: str) -> None:
    assert package_name(specifier) == expected


def test_package_name_rejects_empty() -> None:
    with pytest.raises(ValueError, match="non-empty"):
        package_name("   ")


@pytest.mark.parametrize(
    "specifier, bare",
    [
        ("react", True),
        ("@scope/pkg", True),
        ("./Button", False),
        ("../lib/util", False),
        ("/abs/path.tsx", False),
        ("node:fs", False),
        ("https://esm.sh/react", False),
    ],
)
def test_is_bare_specifier(specifier: str, bare: bool) -> None:
    assert is_bare_specifier(specifier) is bare


def test_missing_set_dedupes_by_package_name_in_first_seen_order() -> None:
    names = ["react-dom/client", "lodash", "react-dom", "@a/b/c", "lodash@4", "@a/b"]
    assert missing_set(names) == ("react-dom", "lodash", "@a/b")


def test_envelope_serializes_stable_shape() -> None:
    env = ErrorEnvelope(
        type="syntax",
        message="Build failed",
        diagnostics=[Diagnostic(text='Expected ";"', file="a.tsx", line=3, column=7, line_text="let x")],
    )
    obj = json.loads(env.to_json())
    assert obj == {
        "error": True,
        "type": "syntax",
        "message": "Build failed",
        "diagnostics": [
            {"text": 'Expected ";"', "location": {"file": "a.tsx", "line": 3, "column": 7, "lineText": "let x"}}
        ],
    }


def test_envelope_rejects_type_outside_taxonomy() -> None:
    with pytest.raises(ValueError, match="ErrorEnvelope.type"):
        ErrorEnvelope(type="fatal", message="x")


def test_diagnostic_from_esbuild_message_without_location() -> None:
    d = Diagnostic.from_message({"text": "boom", "location": None})
    assert d.text == "boom"
    assert d.to_dict() == {"text": "boom", "location": None}


def test_build_results_are_mutually_exclusive() -> None:
    ok = BuildSuccess(script="x")
    bad = BuildFailure(envelope=ErrorEnvelope(type="unknown", message="m"))
    assert ok.ok and not bad.ok
    assert not hasattr(ok, "envelope")
    assert not hasattr(bad, "script")
