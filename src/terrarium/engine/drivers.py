"""Generated driver programs for the JavaScript tools.

esbuild's module-resolution hook and UnoCSS's generator are only reachable
through their JavaScript APIs, so each pass renders a small ES module program,
feeds it to `node` on stdin (cwd = cache root, so bare imports such as
`esbuild` resolve from the cache) and reads back exactly one JSON answer on
stdout:

    {"ok": true, ...pass-specific fields}
    {"ok": false, "message": str, "errors": [esbuild message, ...]}

Drivers never write files. Their configuration is embedded as a JSON literal.
"""

from __future__ import annotations

import json
from typing import Any

from terrarium.core.errors import BundleError, CompileError, DriverProtocolError
from terrarium.core.model import Diagnostic

from .toolchain import CommandResult

DISCOVER = "discover"
FINALIZE = "finalize"
STYLES = "styles"

DRIVER_KINDS = (DISCOVER, FINALIZE, STYLES)

DRIVER_MARKER = "// terrarium-driver: "

_PRELUDE = r"""
import * as fs from 'node:fs';
import * as path from 'node:path';

const CONFIG = __CONFIG__;

function packageName(specifier) {
  if (specifier.startsWith('@')) {
    const name = specifier.split('/').slice(0, 2).join('/');
    const at = name.indexOf('@', 1);
    return at > 0 ? name.slice(0, at) : name;
  }
  return specifier.split('/')[0].split('@')[0];
}

function isInstalled(specifier) {
  return fs.existsSync(path.join(CONFIG.nodeModules, ...packageName(specifier).split('/')));
}

function report(answer) {
  process.stdout.write(JSON.stringify(answer));
}
"""

_EPILOGUE = r"""
main().then(
  (result) => report({ ok: true, ...result }),
  (err) => {
    report({
      ok: false,
      message: String((err && err.message) || err),
      errors: (err && Array.isArray(err.errors)) ? err.errors : [],
    });
    process.exitCode = 1;
  },
);
"""

_BODIES: dict[str, str] = {
    DISCOVER: r"""
import * as esbuild from 'esbuild';

async function main() {
  const specifiers = [];
  const detectMissing = {
    name: 'terrarium-detect-missing',
    setup(build) {
      build.onResolve({ filter: /^[^./]/ }, (args) => {
        if (/^(node|https?|data|file):/i.test(args.path)) return undefined;
        if (isInstalled(args.path)) return undefined;
        specifiers.push(args.path);
        return { path: args.path, external: true };
      });
    },
  };
  await esbuild.build({
    entryPoints: [CONFIG.entry],
    bundle: true,
    format: 'esm',
    jsx: 'automatic',
    jsxImportSource: 'react',
    write: false,
    outfile: 'out.js',
    plugins: [detectMissing],
    nodePaths: [CONFIG.nodeModules],
    logLevel: 'silent',
  });
  return { specifiers };
}
""",
    FINALIZE: r"""
import * as esbuild from 'esbuild';

async function main() {
  const result = await esbuild.build({
    stdin: {
      contents: CONFIG.harness,
      resolveDir: CONFIG.resolveDir,
      sourcefile: CONFIG.sourcefile,
      loader: 'tsx',
    },
    bundle: true,
    format: 'iife',
    platform: 'browser',
    jsx: 'automatic',
    jsxImportSource: 'react',
    write: false,
    outfile: 'out.js',
    nodePaths: [CONFIG.nodeModules],
    minify: false,
    sourcemap: false,
    logLevel: 'silent',
  });
  if (result.errors.length > 0) {
    const err = new Error('Build failed with ' + result.errors.length + ' error(s)');
    err.errors = result.errors;
    throw err;
  }
  if (result.outputFiles.length !== 1) {
    throw new Error('Expected exactly one output file, got ' + result.outputFiles.length);
  }
  return { text: result.outputFiles[0].text };
}
""",
    STYLES: r"""
import { createGenerator } from '@unocss/core';
import { presetUno } from '@unocss/preset-uno';

async function main() {
  const generator = await createGenerator({ presets: [presetUno()] });
  const { css } = await generator.generate(CONFIG.corpus, { preflights: true });
  const resetPath = path.join(CONFIG.nodeModules, '@unocss', 'reset', 'tailwind.css');
  const reset = fs.readFileSync(resetPath, 'utf8');
  return { css: reset + '\n' + css };
}
""",
}


def render_driver(kind: str, config: dict[str, Any]) -> str:
    """Render the driver program for `kind` with `config` embedded."""
    if kind not in _BODIES:
        raise ValueError(f"driver kind: expected one of {list(DRIVER_KINDS)}, got {kind!r}")
    header = f"{DRIVER_MARKER}{kind}\n"
    prelude = _PRELUDE.replace("__CONFIG__", json.dumps(config))
    return header + prelude.lstrip("\n") + _BODIES[kind] + _EPILOGUE


def driver_kind(source: str) -> str | None:
    """Return the kind recorded on a rendered driver's first line."""
    first = source.split("\n", 1)[0]
    if first.startswith(DRIVER_MARKER):
        return first[len(DRIVER_MARKER):].strip()
    return None


def _tail(text: str, limit: int = 1500) -> str:
    text = text.strip()
    return text[-limit:]


def parse_answer(result: CommandResult, *, kind: str) -> dict[str, Any]:
    """Decode a driver's JSON answer.

    Raises:
        DriverProtocolError: no JSON object on stdout (node crashed, missing module, ...).
        CompileError: the driver reported compiler errors.
        BundleError: the driver reported a failure without compiler errors.
    """
    try:
        answer = json.loads(result.stdout)
    except ValueError:
        detail = _tail(result.stderr) or _tail(result.stdout) or "(no output)"
        raise DriverProtocolError(f"{kind} driver exited with code {result.returncode}:\n{detail}") from None
    if not isinstance(answer, dict) or "ok" not in answer:
        raise DriverProtocolError(f"{kind} driver returned an unexpected answer")

    if answer["ok"]:
        return answer

    message = str(answer.get("message") or f"{kind} failed")
    errors = answer.get("errors") or []
    if errors:
        raise CompileError(message, diagnostics=[Diagnostic.from_message(e) for e in errors])
    raise BundleError(message)
