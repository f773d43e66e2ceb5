"""Host toolchain: locating node/npm and running them as subprocesses.

All external processes go through a `Runner` callable so the pipeline can be
exercised without node or npm installed (tests pass a scripted runner).
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Sequence

from terrarium.core.errors import ToolchainError

logger = logging.getLogger(__name__)

NODE_NOT_FOUND = "Node.js not found. Install it from https://nodejs.org"

# Common install locations checked when node is not on PATH (GUI launches
# often get a minimal PATH).
_NODE_CANDIDATES: tuple[Path, ...] = (
    Path("/usr/local/bin/node"),
    Path("/opt/homebrew/bin/node"),
)

_VERSION_RE = re.compile(r"v?(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined captured output (stdout then stderr)."""
        return "\n".join(s for s in (self.stdout, self.stderr) if s)


Runner = Callable[..., CommandResult]


def run_command(
    argv: Sequence[str],
    *,
    cwd: Path | None = None,
    input: str | None = None,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> CommandResult:
    """Run a command to completion, capturing text output.

    Raises:
        ToolchainError: the executable could not be started.
        subprocess.TimeoutExpired: the bounded timeout elapsed (process is killed).
    """
    args = [str(a) for a in argv]
    logger.debug("Running %s (cwd=%s)", args[:3], cwd)
    try:
        proc = subprocess.run(
            args,
            cwd=str(cwd) if cwd is not None else None,
            input=input,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except (FileNotFoundError, PermissionError) as e:
        raise ToolchainError(f"Failed to start {args[0]}: {e}") from e
    return CommandResult(argv=tuple(args), returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def _version_key(path: Path) -> tuple[int, ...]:
    m = _VERSION_RE.match(path.name)
    return tuple(int(x) for x in m.groups()) if m else (-1,)


def _nvm_node(home: Path) -> Path | None:
    versions_dir = home / ".nvm" / "versions" / "node"
    if not versions_dir.is_dir():
        return None
    versions = [p for p in versions_dir.iterdir() if (p / "bin" / "node").exists()]
    if not versions:
        return None
    latest = max(versions, key=_version_key)
    return latest / "bin" / "node"


def locate_node(explicit: Path | None = None, *, home: Path | None = None) -> Path:
    """Find a node binary: explicit path, PATH, common locations, newest nvm install."""
    if explicit is not None:
        p = Path(explicit)
        if not p.exists():
            raise ToolchainError(f"Configured node binary not found: {p}")
        return p

    found = shutil.which("node")
    if found:
        return Path(found)

    for candidate in _NODE_CANDIDATES:
        if candidate.exists():
            return candidate

    nvm = _nvm_node(Path.home() if home is None else Path(home))
    if nvm is not None:
        return nvm

    raise ToolchainError(NODE_NOT_FOUND)


def toolchain_env(node: Path, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Subprocess environment with node's directory first on PATH (so npm is found)."""
    env = dict(os.environ if base is None else base)
    node_dir = str(Path(node).parent)
    existing = env.get("PATH")
    env["PATH"] = os.pathsep.join([node_dir, existing]) if existing else os.pathsep.join([node_dir, "/usr/bin", "/bin"])
    return env


def locate_npm(node: Path, env: Mapping[str, str]) -> Path:
    found = shutil.which("npm", path=env.get("PATH"))
    if not found:
        raise ToolchainError(f"npm not found next to {node}")
    return Path(found)


@dataclass(frozen=True)
class Toolchain:
    """Resolved node/npm binaries plus the runner used to invoke them."""

    node: Path
    npm: Path
    env: dict[str, str] = field(default_factory=dict)
    runner: Runner = run_command

    @classmethod
    def discover(cls, node: Path | None = None, *, runner: Runner = run_command) -> "Toolchain":
        node_path = locate_node(node)
        env = toolchain_env(node_path)
        npm_path = locate_npm(node_path, env)
        logger.debug("Using node=%s npm=%s", node_path, npm_path)
        return cls(node=node_path, npm=npm_path, env=env, runner=runner)

    def run_node(self, source: str, *, cwd: Path, timeout: float) -> CommandResult:
        """Run an ES module program given as text on node's stdin."""
        return self.runner(
            [str(self.node), "--input-type=module", "-"],
            cwd=cwd,
            input=source,
            env=self.env,
            timeout=timeout,
        )

    def run_npm(self, args: Sequence[str], *, cwd: Path, timeout: float) -> CommandResult:
        return self.runner([str(self.npm), *args], cwd=cwd, env=self.env, timeout=timeout)
