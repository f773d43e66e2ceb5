from __future__ import annotations

import json
from pathlib import Path

from terrarium.engine.harness import (
    MOUNT_BRANCHES,
    MOUNT_KINDS,
    NO_DEFAULT_EXPORT_MESSAGE,
    ROOT_ELEMENT_ID,
    build_harness,
)


def test_harness_imports_entry_as_namespace_and_react_primitives(tmp_path: Path) -> None:
    entry = tmp_path / "My Component.tsx"
    src = build_harness(entry)

    assert f"import * as _Module from {json.dumps(entry.as_posix())};" in src
    assert "import { createElement } from 'react';" in src
    assert "import { createRoot } from 'react-dom/client';" in src


def test_harness_mounts_once_into_root_after_clearing(tmp_path: Path) -> None:
    src = build_harness(tmp_path / "a.tsx")

    assert src.count("createRoot(") == 1
    assert src.count(f"document.getElementById({json.dumps(ROOT_ELEMENT_ID)})") == 1
    clear = src.index("rootEl.innerHTML = '';")
    unmount = src.index("previous.unmount()")
    mount = src.index("createRoot(rootEl)")
    assert unmount < clear < mount


def test_harness_has_one_branch_per_mount_kind_in_fallback_order(tmp_path: Path) -> None:
    src = build_harness(tmp_path / "a.tsx")

    positions = [src.index(f"case {json.dumps(kind)}:") for kind in MOUNT_KINDS]
    assert positions == sorted(positions)
    for kind in MOUNT_KINDS:
        assert src.count(f"case {json.dumps(kind)}:") == 1
        assert MOUNT_BRANCHES[kind] in src


def test_harness_carries_placeholder_for_missing_default_export(tmp_path: Path) -> None:
    src = build_harness(tmp_path / "a.tsx")
    assert json.dumps(NO_DEFAULT_EXPORT_MESSAGE) in src


def test_harness_does_not_rescan_substituted_paths(tmp_path: Path) -> None:
    entry = tmp_path / "__ROOT_ID__" / "x.tsx"
    src = build_harness(entry)
    assert json.dumps(entry.as_posix()) in src
