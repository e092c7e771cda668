"""Git operations on one GitHub repository.

A ``Repository`` binds an ``owner/name`` pair to an authenticated httpx
client.  Each method is a single request/response exchange against the
GitHub REST API and never retries.  Branch names and SHAs are percent-encoded
in URL paths.  Lookups expect HTTP 200 (404 meaning
"absent"), creations and merges expect 201, deletions expect 204.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import quote

import httpx

from ..constants import EMPTY_TREE_COMMIT_MESSAGE, EMPTY_TREE_SHA
from ..errors import (
    ConfigError,
    CreateError,
    DeleteError,
    GitHubLookupError,
    MergeError,
    ProtocolError,
    UpdateError,
)
from .api import github_request, require_field

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullRequest:
    """A pull request created on GitHub."""

    number: int
    url: str


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    A leading ``github.com/`` (as copied from a browser) is stripped.
    Raises ``ConfigError`` if the slug is not of the form owner/name.
    """
    if not slug or not slug.strip():
        raise ConfigError(
            "the repository cannot be empty, please specify a repository of the form OwnerName/RepositoryName"
        )
    normalized = slug.strip()
    for prefix in ("https://", "http://"):
        if normalized.startswith(prefix):
            normalized = normalized[len(prefix):]
    if normalized.startswith("github.com/"):
        normalized = normalized[len("github.com/"):]
    normalized = normalized.rstrip("/")
    owner, sep, name = normalized.partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ConfigError(f"the repository {slug!r} must be of the form OwnerName/RepositoryName")
    return owner, name


@dataclass(frozen=True)
class Repository:
    """A GitHub repository and the client used to reach it."""

    owner: str
    name: str
    client: httpx.Client = field(repr=False, compare=False)

    @classmethod
    def from_slug(cls, slug: str, client: httpx.Client) -> Repository:
        owner, name = parse_repo_slug(slug)
        return cls(owner=owner, name=name, client=client)

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.slug

    # Lookups

    def exists(self) -> bool:
        """Return ``True`` if the repository exists and is visible to the token.

        A 200 response naming a different repository is reported as
        ``GitHubLookupError`` rather than "not found".
        """
        path = f"/repos/{self.slug}"
        operation = f"getting repository {self.slug!r}"
        data = github_request(
            self.client, "GET", path,
            operation=operation, expected_status=200, error_cls=GitHubLookupError, allow_404=True,
        )
        if data is None:
            return False
        full_name = data.get("full_name") if isinstance(data, dict) else None
        if not isinstance(full_name, str) or full_name.lower() != self.slug.lower():
            raise GitHubLookupError(
                f"incorrect repository name {full_name!r} returned while checking if repository {self.slug!r} exists",
                operation=operation,
                status_code=200,
            )
        return True

    def branch_exists(self, branch: str) -> bool:
        """Return ``True`` if ``branch`` exists in the repository."""
        path = f"/repos/{self.slug}/branches/{quote(branch, safe='/')}"
        operation = f"determining if branch {branch!r} exists in repository {self.slug!r}"
        data = github_request(
            self.client, "GET", path,
            operation=operation, expected_status=200, error_cls=GitHubLookupError, allow_404=True,
        )
        if data is None:
            return False
        name = data.get("name") if isinstance(data, dict) else None
        if name != branch:
            raise GitHubLookupError(
                f"incorrect name {name!r} returned while checking if branch {branch!r} exists",
                operation=operation,
                status_code=200,
            )
        return True

    def commit_exists(self, sha: str) -> bool:
        """Return ``True`` if commit ``sha`` exists in the repository."""
        path = f"/repos/{self.slug}/git/commits/{quote(sha, safe='')}"
        operation = f"getting commit {sha!r} in repository {self.slug!r}"
        data = github_request(
            self.client, "GET", path,
            operation=operation, expected_status=200, error_cls=GitHubLookupError, allow_404=True,
        )
        if data is None:
            return False
        returned = data.get("sha") if isinstance(data, dict) else None
        if returned != sha:
            raise GitHubLookupError(
                f"incorrect commit sha {returned!r} returned while checking if commit {sha!r} exists",
                operation=operation,
                status_code=200,
            )
        return True

    def branch_commit_sha(self, branch: str) -> str:
        """Return the SHA of the commit ``branch`` points at."""
        path = f"/repos/{self.slug}/branches/{quote(branch, safe='/')}"
        operation = f"getting branch {branch!r} in repository {self.slug!r}"
        data = github_request(
            self.client, "GET", path,
            operation=operation, expected_status=200, error_cls=GitHubLookupError,
        )
        commit = require_field(data, "commit", path=path, operation=operation, status_code=200)
        return require_field(commit, "sha", path=path, operation=operation, status_code=200)

    # Mutations

    def create_empty_tree_commit(self, message: str = EMPTY_TREE_COMMIT_MESSAGE) -> str:
        """Create a parentless commit of the empty tree and return its SHA."""
        path = f"/repos/{self.slug}/git/commits"
        operation = f"creating an empty-tree commit in repository {self.slug!r}"
        data = github_request(
            self.client, "POST", path,
            operation=operation, expected_status=201, error_cls=CreateError,
            json={"message": message, "tree": EMPTY_TREE_SHA, "parents": []},
        )
        sha = require_field(data, "sha", path=path, operation=operation, status_code=201)
        logger.info("Created empty-tree commit %s in %s", sha, self.slug)
        return sha

    def create_branch(self, branch: str, sha: str) -> None:
        """Create ``branch`` pointing at commit ``sha``.

        An existing branch or an unknown commit both raise ``CreateError``;
        the status code and GitHub's message tell them apart.
        """
        path = f"/repos/{self.slug}/git/refs"
        github_request(
            self.client, "POST", path,
            operation=f"creating branch {branch!r} at commit {sha!r} in repository {self.slug!r}",
            expected_status=201,
            error_cls=CreateError,
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        logger.info("Created branch %s at %s in %s", branch, sha, self.slug)

    def merge_branch(self, base_branch: str, head_branch: str) -> None:
        """Merge ``head_branch`` into ``base_branch`` on the server.

        Only a 201 (merge commit created) counts as success: a conflict
        (409), a missing branch (404) and "nothing to merge" (204) all raise
        ``MergeError``.
        """
        path = f"/repos/{self.slug}/merges"
        github_request(
            self.client, "POST", path,
            operation=f"merging branch {head_branch!r} into {base_branch!r} in repository {self.slug!r}",
            expected_status=201,
            error_cls=MergeError,
            json={
                "base": base_branch,
                "head": head_branch,
                "commit_message": f"Merge branch {head_branch!r} into {base_branch!r}",
            },
        )
        logger.info("Merged %s into %s in %s", head_branch, base_branch, self.slug)

    def create_pull_request(self, title: str, body: str, base_branch: str, head_branch: str) -> PullRequest:
        """Open a pull request comparing ``head_branch`` against ``base_branch``."""
        path = f"/repos/{self.slug}/pulls"
        operation = (
            f"creating pull request in repository {self.slug!r}, "
            f"base branch {base_branch!r}, and head branch {head_branch!r}"
        )
        data = github_request(
            self.client, "POST", path,
            operation=operation, expected_status=201, error_cls=CreateError,
            json={"title": title, "body": body, "base": base_branch, "head": head_branch},
        )
        url = require_field(data, "html_url", path=path, operation=operation, status_code=201)
        number = require_field(data, "number", path=path, operation=operation, status_code=201)
        if not isinstance(number, int):
            raise ProtocolError(
                f"the GitHub API returned a non-integer pull request number {number!r} while {operation}",
                operation=operation,
                status_code=201,
            )
        return PullRequest(number=number, url=url)

    def delete_branch(self, branch: str) -> None:
        """Delete ``branch``."""
        path = f"/repos/{self.slug}/git/refs/heads/{quote(branch, safe='/')}"
        github_request(
            self.client, "DELETE", path,
            operation=f"deleting branch {branch!r} in repository {self.slug!r}",
            expected_status=204,
            error_cls=DeleteError,
        )
        logger.info("Deleted branch %s in %s", branch, self.slug)

    def close_pull_request(self, number: int) -> None:
        """Close pull request ``number`` without merging it."""
        path = f"/repos/{self.slug}/pulls/{number}"
        github_request(
            self.client, "PATCH", path,
            operation=f"closing pull request #{number} in repository {self.slug!r}",
            expected_status=200,
            error_cls=UpdateError,
            json={"state": "closed"},
        )
        logger.info("Closed pull request #%s in %s", number, self.slug)
