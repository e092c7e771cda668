"""GitHub REST API request helper.

Every remote call made by prme goes through ``github_request``: it issues one
request, checks the status code against the single expected success code for
that call and decodes JSON only on the success path.  Failures are mapped to
the error kind of the calling operation so that error handling stays in one
place.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..errors import GitHubAPIError, ProtocolError
from ..policy.redaction import redact_secrets

logger = logging.getLogger(__name__)


def _error_detail(resp: httpx.Response) -> str:
    """Return GitHub's error ``message`` from ``resp``, or its raw text."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip()
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.text.strip()


def github_request(
    client: httpx.Client,
    method: str,
    path: str,
    *,
    operation: str,
    expected_status: int,
    error_cls: type[GitHubAPIError],
    json: dict[str, object] | None = None,
    allow_404: bool = False,
) -> Any:
    """Perform one request against the GitHub API.

    :param client: client bound to the API base URL (see ``get_github_client``)
    :param path: API path such as ``/repos/owner/name``
    :param operation: human-readable description used in error messages,
        e.g. ``"getting branch 'main' in repository 'o/r'"``
    :param expected_status: the only status code treated as success
    :param error_cls: error raised for any other status or a network failure
    :param allow_404: return ``None`` on 404 instead of raising
    :return: decoded JSON body, ``{}`` for a bodiless 200 or 201, or ``None``
        for 404 (when allowed) and for 204
    :raises ProtocolError: if a success response body is not valid JSON
    """
    logger.debug("%s %s", method, path)
    try:
        resp = client.request(method, path, json=json)
    except httpx.HTTPError as exc:
        message = redact_secrets(f"request to {path} failed while {operation}: {exc}")
        logger.error(message)
        raise error_cls(message, operation=operation) from exc

    if allow_404 and resp.status_code == 404:
        return None

    if resp.status_code != expected_status:
        detail = redact_secrets(_error_detail(resp))
        logger.error("GitHub API error %s for %s: %s", resp.status_code, path, detail)
        message = f"HTTP {resp.status_code} for {path} while {operation}"
        if detail:
            message = f"{message}: {detail}"
        raise error_cls(message, operation=operation, status_code=resp.status_code)

    if not resp.content:
        # A bodiless 200/201 must not read like the 404 "absent" result
        return None if resp.status_code == 204 else {}
    try:
        return resp.json()
    except ValueError as exc:
        raise ProtocolError(
            f"invalid JSON in HTTP {resp.status_code} response for {path} while {operation}",
            operation=operation,
            status_code=resp.status_code,
        ) from exc


def require_field(data: Any, key: str, *, path: str, operation: str, status_code: int) -> Any:
    """Return ``data[key]``, raising ``ProtocolError`` if it is missing or empty."""
    value = data.get(key) if isinstance(data, dict) else None
    if value is None or value == "":
        raise ProtocolError(
            f"the GitHub API did not return {key!r} in the HTTP {status_code} response "
            f"for {path} while {operation}",
            operation=operation,
            status_code=status_code,
        )
    return value
