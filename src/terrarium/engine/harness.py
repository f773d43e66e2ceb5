"""Harness builder: the synthesized entry module that mounts the component.

The harness imports the user's file as a namespace and mounts its default
export into the host document's `#root` element. The default export is tagged
once as one of three mount kinds, in fallback order:

- component: a callable -> instantiated with createElement and rendered
- element:   any other non-null value -> rendered as-is
- missing:   undefined/null -> a fixed placeholder message is rendered

Each kind maps to exactly one generated branch (`MOUNT_BRANCHES`). Before
mounting, a root left by a previous bundle is unmounted and the target is
cleared, so rendering repeatedly into the same host is idempotent.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

ROOT_ELEMENT_ID = "root"
ROOT_HANDLE_KEY = "__terrariumRoot"

NO_DEFAULT_EXPORT_MESSAGE = "No default export found. The TSX file must export a default React component."

COMPONENT = "component"
ELEMENT = "element"
MISSING = "missing"

MOUNT_KINDS = (COMPONENT, ELEMENT, MISSING)

MOUNT_BRANCHES: dict[str, str] = {
    COMPONENT: "root.render(createElement(Component));",
    ELEMENT: "root.render(Component);",
    MISSING: "root.render(createElement('p', { style: PLACEHOLDER_STYLE }, PLACEHOLDER));",
}

_TEMPLATE = """\
import * as _Module from __ENTRY__;
import { createElement } from 'react';
import { createRoot } from 'react-dom/client';

const Component = _Module.default;
const PLACEHOLDER = __PLACEHOLDER__;
const PLACEHOLDER_STYLE = { color: '#888', fontFamily: 'system-ui', padding: '24px' };

const mountKind =
  typeof Component === 'function' ? __COMPONENT__
  : Component !== undefined && Component !== null ? __ELEMENT__
  : __MISSING__;

const rootEl = document.getElementById(__ROOT_ID__);
if (rootEl) {
  const previous = window[__ROOT_KEY__];
  if (previous) previous.unmount();
  rootEl.innerHTML = '';
  const root = createRoot(rootEl);
  window[__ROOT_KEY__] = root;
  switch (mountKind) {
__BRANCHES__
  }
}
"""


_PLACEHOLDER_RE = re.compile(r"__[A-Z_]+__")


def _branch(kind: str) -> str:
    return f"    case {json.dumps(kind)}:\n      {MOUNT_BRANCHES[kind]}\n      break;"


def build_harness(entry: Path) -> str:
    """Return the harness source for the (absolute) entry path."""
    replacements = {
        "__ENTRY__": json.dumps(Path(entry).as_posix()),
        "__PLACEHOLDER__": json.dumps(NO_DEFAULT_EXPORT_MESSAGE),
        "__COMPONENT__": json.dumps(COMPONENT),
        "__ELEMENT__": json.dumps(ELEMENT),
        "__MISSING__": json.dumps(MISSING),
        "__ROOT_ID__": json.dumps(ROOT_ELEMENT_ID),
        "__ROOT_KEY__": json.dumps(ROOT_HANDLE_KEY),
        "__BRANCHES__": "\n".join(_branch(k) for k in MOUNT_KINDS),
    }
    # Single pass so substituted values are never rescanned.
    return _PLACEHOLDER_RE.sub(lambda m: replacements[m.group(0)], _TEMPLATE)
