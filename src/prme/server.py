"""MCP stdio server entrypoint for prme.

The server runs over standard input/output using the Model Context Protocol.
It registers tool functions that clients can invoke to create and clean up
full review pull requests.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import Any

from mcp.server.fastmcp import FastMCP

from .constants import DEFAULT_LOG_LEVEL
from .telemetry.logger import configure_logging
from .tools import review_tools


def build_tools_dispatch() -> dict[str, Callable[..., dict[str, Any]]]:
    """Return a mapping from tool names to callables.

    Each callable accepts keyword arguments and returns a JSON-serializable
    dictionary.
    """
    return {
        "create_full_pull_request": review_tools.create_full_pull_request,
        "cleanup_full_pull_request": review_tools.cleanup_full_pull_request,
        "github_branch_exists": review_tools.github_branch_exists,
    }


def build_server() -> FastMCP:
    """Create the MCP server with every tool registered."""
    mcp = FastMCP("prme")
    dispatch = build_tools_dispatch()
    for name, func in dispatch.items():
        mcp.add_tool(func, name=name)
    logging.getLogger(__name__).info("Registered %d tools", len(dispatch))
    return mcp


def main() -> None:
    """Entrypoint for the prme MCP server."""
    # stdout is used for the MCP protocol
    configure_logging(os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL))
    logging.getLogger(__name__).info("Starting prme MCP server")
    build_server().run(transport="stdio")


if __name__ == "__main__":
    main()
