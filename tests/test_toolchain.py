from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from terrarium.config import CACHE_DIR_ENV, NODE_ENV, BundlerConfig, default_cache_dir
from terrarium.core.errors import ToolchainError
from terrarium.engine import toolchain as tc
from terrarium.engine.drivers import DISCOVER, render_driver
from terrarium.engine.toolchain import NODE_NOT_FOUND, Toolchain, locate_node, run_command, toolchain_env
from conftest import FAKE_NODE, FAKE_NPM, FakeRunner


def _fake_node(root: Path, version: str) -> Path:
    p = root / ".nvm" / "versions" / "node" / version / "bin" / "node"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text("#!/bin/sh\n", encoding="utf-8")
    return p


def test_explicit_node_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ToolchainError, match="not found"):
        locate_node(tmp_path / "missing" / "node")

    node = tmp_path / "node"
    node.write_text("", encoding="utf-8")
    assert locate_node(node) == node


def test_newest_nvm_install_wins_when_path_lookup_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tc.shutil, "which", lambda *a, **k: None)
    monkeypatch.setattr(tc, "_NODE_CANDIDATES", ())
    _fake_node(tmp_path, "v9.11.2")
    newest = _fake_node(tmp_path, "v18.19.0")
    _fake_node(tmp_path, "v16.20.2")

    assert locate_node(home=tmp_path) == newest


def test_no_node_anywhere_is_a_toolchain_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(tc.shutil, "which", lambda *a, **k: None)
    monkeypatch.setattr(tc, "_NODE_CANDIDATES", ())

    with pytest.raises(ToolchainError) as ei:
        locate_node(home=tmp_path)
    assert str(ei.value) == NODE_NOT_FOUND


def test_toolchain_env_puts_node_dir_first_on_path() -> None:
    env = toolchain_env(Path("/opt/node/bin/node"), {"PATH": "/usr/bin", "HOME": "/home/x"})
    assert env["PATH"].split(os.pathsep)[0] == "/opt/node/bin"
    assert env["HOME"] == "/home/x"


def test_run_command_captures_output_and_reports_unstartable_binaries(tmp_path: Path) -> None:
    result = run_command([sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"], input="hi")
    assert result.ok
    assert result.stdout.strip() == "HI"

    with pytest.raises(ToolchainError, match="Failed to start"):
        run_command([str(tmp_path / "no-such-binary")])


def test_node_programs_are_fed_on_stdin_as_es_modules(tmp_path: Path) -> None:
    runner = FakeRunner(tmp_path / "node_modules")
    toolchain = Toolchain(node=FAKE_NODE, npm=FAKE_NPM, env={"PATH": "/fake/bin"}, runner=runner)
    source = render_driver(DISCOVER, {"entry": "/x.tsx", "nodeModules": str(tmp_path)})

    toolchain.run_node(source, cwd=tmp_path, timeout=5)
    toolchain.run_npm(["install", "--prefix", str(tmp_path), "zod"], cwd=tmp_path, timeout=7)

    node_call, npm_call = runner.calls
    assert node_call["argv"] == (str(FAKE_NODE), "--input-type=module", "-")
    assert node_call["input"] == source
    assert node_call["cwd"] == tmp_path
    assert npm_call["argv"][:2] == (str(FAKE_NPM), "install")
    assert npm_call["timeout"] == 7
    assert (tmp_path / "node_modules" / "zod").is_dir()


def test_config_from_env_and_overrides(tmp_path: Path) -> None:
    cfg = BundlerConfig.from_env({CACHE_DIR_ENV: str(tmp_path / "c"), NODE_ENV: "/usr/bin/node"}, styles=False)
    assert cfg.cache_dir == tmp_path / "c"
    assert cfg.node == Path("/usr/bin/node")
    assert cfg.styles is False
    assert cfg.node_modules == tmp_path / "c" / "node_modules"

    assert BundlerConfig.from_env({}).cache_dir == default_cache_dir()


def test_config_rejects_non_positive_timeouts(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="install_timeout"):
        BundlerConfig(cache_dir=tmp_path, install_timeout=0)
