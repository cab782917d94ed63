"""Unified CLI entry point for gsearch.

Config precedence: settings.default.toml -> settings.local.toml -> env vars (GSEARCH_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

import typer

from gsearch.cli.search_cmd import register_search_commands
from gsearch.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("gsearch")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "gsearch — stealth browser Google search for agents. "
    "Config precedence: settings.default.toml -> settings.local.toml -> env vars (GSEARCH_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

register_search_commands(app)
app.add_typer(settings_app, name="settings")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context, version: bool = typer.Option(False, "--version", help="Show version and exit.")) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"gsearch {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
