"""Authentication helpers for the GitHub API."""

from __future__ import annotations

import httpx

from .. import __version__
from ..config import Settings


def get_github_client(settings: Settings, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Return a GitHub httpx client with the Authorization header set.

    Paths passed to the client are relative to ``settings.api_url``.  A custom
    ``transport`` may be supplied, for example to talk to a fake server.
    """
    return httpx.Client(
        base_url=settings.api_url,
        headers={
            "Authorization": f"token {settings.github_token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": f"prme/{__version__}",
        },
        timeout=settings.timeout_s,
        transport=transport,
    )
