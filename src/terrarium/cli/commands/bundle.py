"""`terrarium bundle` command.

Bundles one component file and writes the result to stdout:
- success: the script text, exit code 0
- failure: the JSON error envelope, exit code 1

Callers tell the two apart by exit code. `--json` frames success output as
`{"error": false, "script": ...}` for callers that prefer to parse every output.
"""

from __future__ import annotations

import json

import typer

from terrarium.config import BundlerConfig
from terrarium.core.model import BuildResult, BuildSuccess
from terrarium.pipeline import bundle


def emit_result(result: BuildResult, *, framed: bool = False) -> None:
    """Write `result` to stdout; raise typer.Exit(1) on failure."""
    if isinstance(result, BuildSuccess):
        if framed:
            typer.echo(json.dumps({"error": False, "script": result.script}), nl=False)
        else:
            typer.echo(result.script, nl=False)
        return
    typer.echo(result.envelope.to_json(), nl=False)
    raise typer.Exit(code=1)


def run_bundle(entry: str, *, styles: bool, framed: bool) -> None:
    config = BundlerConfig.from_env(styles=styles)
    emit_result(bundle(entry, config), framed=framed)


def register(app: typer.Typer) -> None:
    @app.command("bundle")
    def bundle_cmd(
        entry: str = typer.Argument(..., help="Component source file (.tsx/.jsx/.ts/.js)."),
        no_styles: bool = typer.Option(False, "--no-styles", help="Skip utility style generation."),
        framed: bool = typer.Option(False, "--json", help="Wrap successful output in a JSON object too."),
    ) -> None:
        """Bundle a component file into a self-mounting browser script."""
        run_bundle(entry, styles=not no_styles, framed=framed)
