"""CLI commands for running searches and the MCP server."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)
out = Console()


def register_search_commands(app: typer.Typer) -> None:
    """Attach ``search`` and ``serve`` to *app*."""
    app.command("search")(search_command)
    app.command("serve")(serve_command)


def search_command(
    query: str = typer.Argument(..., help="Search query."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Number of results (default 10)."),
    timeout: Optional[int] = typer.Option(None, "--timeout", "-t", min=1, help="Timeout in milliseconds (default 60000)."),
    language: Optional[str] = typer.Option(None, "--language", help="Result language, e.g. zh-CN, en-US."),
    region: Optional[str] = typer.Option(None, "--region", help="Result region, e.g. cn, com."),
    state_file: Optional[Path] = typer.Option(None, "--state-file", help="Browser state file path."),
    no_save_state: bool = typer.Option(False, "--no-save-state", help="Do not save browser state after the search."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level on stderr."),
) -> None:
    """Run one Google search and print the results."""
    from gsearch.logs import configure_logging, shutdown_logging
    from gsearch.orchestrator import google_search

    configure_logging(level="DEBUG" if verbose else None)
    try:
        response = asyncio.run(
            google_search(
                query,
                limit=limit,
                timeout_ms=timeout,
                locale=language,
                region=region,
                state_path=state_file,
                suppress_state_persistence=no_save_state,
            )
        )
    except ValidationError as e:
        message = "; ".join(err["msg"] for err in e.errors())
        console.print(f"[red]✗[/red] Invalid search arguments: {message}")
        raise typer.Exit(code=2) from None
    finally:
        shutdown_logging()

    if as_json:
        out.print_json(response.to_json())
    else:
        table = Table(title=f"Results for: {response.query}", show_lines=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Link", style="cyan", overflow="fold")
        table.add_column("Snippet")
        for i, result in enumerate(response.results, start=1):
            table.add_row(str(i), result.title, result.link, result.snippet)
        out.print(table)

    if response.is_failure:
        console.print(f"[red]✗[/red] Search failed: {response.error}")
        raise typer.Exit(code=1)


def serve_command() -> None:
    """Run the MCP server on stdio."""
    from gsearch.server.mcp_server import main as serve_main

    serve_main()
