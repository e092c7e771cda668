"""Tool module exports for prme.

Each submodule exposes functions that the MCP server registers as tools.

Usage:

    from prme.tools import review_tools
    review_tools.create_full_pull_request(repo="owner/name")
"""

from . import review_tools  # noqa: F401

__all__ = ["review_tools"]
