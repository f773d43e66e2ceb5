"""`terrarium watch` command.

Bundles the entry file, then re-bundles on every change. Each build (and each
first-run dependency install) is written to stdout as one JSON line, the event
channel a host shell listens on:

    {"event": "install-started", "payload": null}
    {"event": "bundle-ready", "payload": "<script>"}
    {"event": "bundle-error", "payload": {...envelope...}}
"""

from __future__ import annotations

import json
from typing import Any

import typer

from terrarium.config import BundlerConfig
from terrarium.pipeline import BundlePipeline
from terrarium.watch import DEFAULT_DEBOUNCE_MS, DEFAULT_POLL_INTERVAL_S, watch


def _emit_line(event: dict[str, Any]) -> None:
    typer.echo(json.dumps(event))


def register(app: typer.Typer) -> None:
    @app.command("watch")
    def watch_cmd(
        entry: str = typer.Argument(..., help="Component source file to watch."),
        no_styles: bool = typer.Option(False, "--no-styles", help="Skip utility style generation."),
        debounce_ms: int = typer.Option(DEFAULT_DEBOUNCE_MS, "--debounce-ms", min=0, help="Minimum delay between rebuilds."),
        poll_interval: float = typer.Option(
            DEFAULT_POLL_INTERVAL_S,
            "--poll-interval",
            min=0.01,
            help="Seconds between modification-time checks.",
        ),
    ) -> None:
        """Bundle a component file and rebuild it whenever it changes."""
        config = BundlerConfig.from_env(styles=not no_styles)
        pipeline = BundlePipeline(config, on_event=lambda name: _emit_line({"event": name, "payload": None}))
        try:
            watch(entry, pipeline.run, _emit_line, debounce_ms=debounce_ms, poll_interval=poll_interval)
        except KeyboardInterrupt:
            raise typer.Exit(code=0)
