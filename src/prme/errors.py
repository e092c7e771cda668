"""Error kinds raised by prme.

Every failure in the workflow surfaces as a subclass of ``PrmeError`` so that
callers (the CLI and MCP tools) can report a single human-readable line.
"""

from __future__ import annotations


class PrmeError(RuntimeError):
    """Base class for all prme errors."""


class ConfigError(PrmeError, ValueError):
    """Invalid or missing input.  Raised before any network call."""


class PreconditionError(PrmeError):
    """Repository or branch state does not allow the workflow to start."""


class GitHubAPIError(PrmeError):
    """A GitHub API call was rejected or returned an inconsistent result.

    ``status_code`` is ``None`` when the request never produced a response
    (network failure, timeout).
    """

    def __init__(self, message: str, *, operation: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class GitHubLookupError(GitHubAPIError, LookupError):
    """A lookup returned an unexpected status or data for another object."""


class CreateError(GitHubAPIError):
    """Creating a commit, ref or pull request failed."""


class MergeError(GitHubAPIError):
    """The server-side merge was rejected."""


class DeleteError(GitHubAPIError):
    """Deleting a ref failed."""


class UpdateError(GitHubAPIError):
    """Updating a pull request failed."""


class ProtocolError(GitHubAPIError):
    """A success response is missing a field the API contract promises."""
