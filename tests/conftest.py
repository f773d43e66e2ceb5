"""Pytest configuration.

This repo follows the `src/` layout. Some environments may invoke a `pytest`
entrypoint from a different Python install than the one used for
`python -m pip install -e ...`, which can cause `import terrarium` to fail.

To keep the suite robust, we ensure `src/` is on `sys.path` during tests.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

_SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from terrarium.config import BundlerConfig  # noqa: E402
from terrarium.engine.drivers import DISCOVER, FINALIZE, STYLES, driver_kind  # noqa: E402
from terrarium.engine.toolchain import CommandResult, Toolchain  # noqa: E402


def pytest_configure() -> None:
    if str(_SRC_DIR) not in sys.path:
        sys.path.insert(0, str(_SRC_DIR))


# =============================================================================
# Scripted node/npm stand-in
# =============================================================================

FAKE_NODE = Path("/fake/bin/node")
FAKE_NPM = Path("/fake/bin/npm")


def driver_config(source: str) -> dict[str, Any]:
    """Extract the JSON config embedded in a rendered driver program."""
    for line in source.splitlines():
        if line.startswith("const CONFIG = "):
            return json.loads(line[len("const CONFIG = "):].rstrip(";"))
    raise AssertionError("driver source has no CONFIG line")


def answer(obj: dict[str, Any], *, returncode: int = 0, stderr: str = "") -> CommandResult:
    return CommandResult(argv=(str(FAKE_NODE),), returncode=returncode, stdout=json.dumps(obj), stderr=stderr)


def ok_answer(**fields: Any) -> CommandResult:
    return answer({"ok": True, **fields})


def fail_answer(message: str, errors: list[dict[str, Any]] | None = None) -> CommandResult:
    return answer({"ok": False, "message": message, "errors": errors or []}, returncode=1)


def esbuild_error(text: str, *, file: str = "entry.tsx", line: int = 1, column: int = 0) -> dict[str, Any]:
    return {"text": text, "location": {"file": file, "line": line, "column": column, "lineText": ""}}


def npm_packages(argv: tuple[str, ...]) -> list[str]:
    """Package names passed to a recorded `npm install` argv."""
    args = list(argv[2:])  # skip npm binary and "install"
    names: list[str] = []
    skip = False
    for a in args:
        if skip:
            skip = False
            continue
        if a == "--prefix":
            skip = True
            continue
        if a.startswith("--"):
            continue
        names.append(a)
    return names


def install_into(node_modules: Path, names: list[str]) -> None:
    for name in names:
        d = node_modules.joinpath(*name.split("/"))
        d.mkdir(parents=True, exist_ok=True)
        (d / "package.json").write_text(json.dumps({"name": name}), encoding="utf-8")


def default_finalize(source: str) -> CommandResult:
    harness = driver_config(source)["harness"]
    return ok_answer(text="(() => {\n" + harness + "\n})();\n")


class FakeRunner:
    """Runner that answers npm and driver invocations without spawning processes.

    - npm install: creates `node_modules/<name>/` for each requested name, unless
      `npm_result` is set, in which case that result is returned instead.
    - drivers: dispatched by kind to `handlers[kind](source) -> CommandResult`.
    """

    def __init__(self, node_modules: Path) -> None:
        self.node_modules = Path(node_modules)
        self.calls: list[dict[str, Any]] = []
        self.npm_result: CommandResult | Callable[[list[str]], CommandResult] | None = None
        self.handlers: dict[str, Callable[[str], CommandResult]] = {
            DISCOVER: lambda src: ok_answer(specifiers=[]),
            FINALIZE: default_finalize,
            STYLES: lambda src: ok_answer(css=".p-4{padding:1rem;}"),
        }

    def __call__(self, argv, *, cwd=None, input=None, env=None, timeout=None) -> CommandResult:
        argv = tuple(str(a) for a in argv)
        kind = "npm" if argv[0] == str(FAKE_NPM) else driver_kind(input or "")
        self.calls.append({"kind": kind, "argv": argv, "cwd": cwd, "input": input, "timeout": timeout})
        if kind == "npm":
            names = npm_packages(argv)
            if self.npm_result is not None:
                return self.npm_result(names) if callable(self.npm_result) else self.npm_result
            install_into(self.node_modules, names)
            return CommandResult(argv=argv, returncode=0, stdout="added %d packages" % len(names))
        return self.handlers[kind](input or "")

    def calls_of(self, kind: str) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["kind"] == kind]

    def installed_batches(self) -> list[list[str]]:
        return [npm_packages(c["argv"]) for c in self.calls_of("npm")]


def make_config(tmp_path: Path, **overrides: Any) -> BundlerConfig:
    return BundlerConfig(cache_dir=tmp_path / "cache", **overrides)


def make_toolchain(runner: FakeRunner) -> Toolchain:
    return Toolchain(node=FAKE_NODE, npm=FAKE_NPM, env={}, runner=runner)


def make_entry(tmp_path: Path, source: str, name: str = "component.tsx") -> Path:
    p = tmp_path / "project" / name
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(source, encoding="utf-8")
    return p


COUNTER_TSX = """\
import { useState } from "react";

export default function Counter() {
  const [count, setCount] = useState(0);
  return (
    <div className="p-4">
      <h1 className="text-2xl font-bold">Count: {count}</h1>
      <button onClick={() => setCount(c => c + 1)}>Increment</button>
    </div>
  );
}
"""
