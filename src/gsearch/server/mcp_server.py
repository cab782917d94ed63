"""MCP server exposing the ``search`` tool over stdio.

The tool returns the JSON-serialized ``SearchResponse`` as text. A failed
search is still a normal result (the failure sentinel); only an error
escaping the orchestrator is reported as an error result.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from gsearch.logs import configure_logging, shutdown_logging
from gsearch.orchestrator import google_search

logger = logging.getLogger(__name__)

SERVER_NAME = "google-search"
ERROR_PREFIX = "Error running Google search"

app = Server(SERVER_NAME)

SEARCH_TOOL = Tool(
    name="search",
    description=(
        "Search Google with a stealth browser and return the organic results as JSON "
        "({query, results: [{title, link, snippet}], language, region}). "
        "A single result titled 'Search failed' means the search could not be completed."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "Search query string."},
            "limit": {"type": "integer", "description": "Number of results to return (default 10)."},
            "timeout": {"type": "integer", "description": "Timeout in milliseconds (default 60000)."},
            "language": {"type": "string", "description": "Result language, e.g. zh-CN, en-US (default zh-CN)."},
            "region": {"type": "string", "description": "Result region, e.g. cn, com, co.jp (default cn)."},
        },
        "required": ["query"],
    },
)


class SearchToolError(Exception):
    """Raised to make the MCP server return an error-flagged tool result."""


async def run_search_tool(arguments: dict[str, Any]) -> list[TextContent]:
    """Execute the ``search`` tool.

    Raises:
        SearchToolError: On invalid arguments or any error escaping the orchestrator.
    """
    try:
        response = await google_search(
            arguments.get("query", ""),
            limit=arguments.get("limit"),
            timeout_ms=arguments.get("timeout"),
            locale=arguments.get("language"),
            region=arguments.get("region"),
        )
    except ValidationError as exc:
        logger.warning("Invalid search arguments: %s", exc)
        raise SearchToolError(f"{ERROR_PREFIX}: invalid arguments: {exc}") from exc
    except Exception as exc:
        logger.error("Unhandled error in search tool: %s", exc, exc_info=True)
        raise SearchToolError(f"{ERROR_PREFIX}: {exc}") from exc

    return [TextContent(type="text", text=response.to_json())]


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [SEARCH_TOOL]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls.

    Exceptions raised here are turned into ``isError`` results by the server.
    """
    logger.info("Tool called: %s %s", name, arguments)
    if name != SEARCH_TOOL.name:
        raise SearchToolError(f"Unknown tool: {name}")
    return await run_search_tool(arguments or {})


async def run_server() -> None:
    """Run the MCP server on stdio until the client disconnects."""
    logger.info("Starting %s MCP server", SERVER_NAME)
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options(),
        )
    logger.info("%s MCP server stopped", SERVER_NAME)


def main() -> None:
    """Main entry point."""
    configure_logging()
    reason = "Process exiting"
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        reason = "Received interrupt"
    finally:
        shutdown_logging(reason)
