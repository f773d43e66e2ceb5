"""Terrarium CLI entrypoints.

- `terrarium`: multi-command application (bundle, watch, cache, version).
- `terrarium-bundle ENTRY`: the single-purpose bundler invoked by a host shell
  once per "open file" action.

Logs go to stderr; stdout carries only the script or the error envelope.
"""

from __future__ import annotations

import logging
import sys

import typer

LOG_FORMAT = "[terrarium] %(levelname)s %(message)s"

app = typer.Typer(
    name="terrarium",
    add_completion=False,
    no_args_is_help=True,
    help="Terrarium: just-in-time bundler for single component files.",
)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


@app.callback()
def _callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
) -> None:
    """Terrarium CLI."""
    configure_logging(verbose)


@app.command("version")
def version() -> None:
    """Print the installed Terrarium version."""
    from terrarium import __version__

    typer.echo(__version__)


def _register_commands() -> None:
    """Register CLI subcommands.

    Importing these modules must remain lightweight so `terrarium --help` is fast.
    """
    from terrarium.cli.commands import bundle as bundle_cmd
    from terrarium.cli.commands import cache as cache_cmd
    from terrarium.cli.commands import watch as watch_cmd

    bundle_cmd.register(app)
    watch_cmd.register(app)
    cache_cmd.register(app)


_register_commands()


bundle_app = typer.Typer(
    name="terrarium-bundle",
    add_completion=False,
    help="Bundle one component file; script on stdout (exit 0) or JSON error envelope (exit 1).",
)


@bundle_app.command()
def bundle_main(
    entry: str = typer.Argument(..., help="Component source file (.tsx/.jsx/.ts/.js)."),
    no_styles: bool = typer.Option(False, "--no-styles", help="Skip utility style generation."),
    framed: bool = typer.Option(False, "--json", help="Wrap successful output in a JSON object too."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
) -> None:
    """Bundle a component file into a self-mounting browser script."""
    from terrarium.cli.commands.bundle import run_bundle

    configure_logging(verbose)
    run_bundle(entry, styles=not no_styles, framed=framed)
