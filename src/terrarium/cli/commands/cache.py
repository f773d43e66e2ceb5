"""`terrarium cache` commands: inspect the dependency cache."""

from __future__ import annotations

import typer

from terrarium.cache.store import CacheStore
from terrarium.config import BundlerConfig
from terrarium.engine.installer import base_packages


def register(app: typer.Typer) -> None:
    cache_app = typer.Typer(help="Inspect the dependency cache.", no_args_is_help=True)

    @cache_app.command("path")
    def cache_path() -> None:
        """Print the cache directory."""
        typer.echo(str(BundlerConfig.from_env().cache_dir))

    @cache_app.command("status")
    def cache_status() -> None:
        """Show which baseline packages are installed."""
        config = BundlerConfig.from_env()
        store = CacheStore(config.cache_dir)
        typer.echo(f"cache: {store.root}")
        for name in base_packages(styles=config.styles):
            state = "installed" if store.is_installed(name) else "missing"
            typer.echo(f"  {name}: {state}")

    app.add_typer(cache_app, name="cache")
