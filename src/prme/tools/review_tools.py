"""Full review pull request tool implementations.

Wraps the workflow and the cleanup helpers as MCP tools.  Each tool loads
``Settings`` from the environment on every call and returns a
JSON-serializable dictionary.  Errors propagate to the MCP server, which
reports them to the client.
"""

from __future__ import annotations

from ..config import Settings, resolve_workflow_config
from ..constants import DEFAULT_BASE_BRANCH, DEFAULT_HEAD_BRANCH
from ..github.auth import get_github_client
from ..github.repository import Repository
from ..workflow import FullPullRequestCreator, cleanup_full_pull_request as _cleanup


def create_full_pull_request(
    repo: str,
    full_branch: str | None = None,
    title: str | None = None,
    body: str | None = None,
    base_branch: str | None = None,
    head_branch: str | None = None,
) -> dict[str, object]:
    """Create a pull request reviewing every file of ``repo``.

    Options left as ``None`` fall back to the ``PRME_*`` environment
    variables and then to the built-in defaults.  Returns the pull request
    URL and number.
    """
    settings = Settings.load_from_env()
    config = resolve_workflow_config(
        repo,
        explicit={
            "full_branch": full_branch,
            "title": title,
            "body": body,
            "base_branch": base_branch,
            "head_branch": head_branch,
        },
    )
    pull_request = FullPullRequestCreator(config, settings).create()
    return {
        "pr_url": pull_request.url,
        "pr_number": pull_request.number,
        "base_branch": config.base_branch,
        "head_branch": config.head_branch,
    }


def cleanup_full_pull_request(
    repo: str,
    base_branch: str = DEFAULT_BASE_BRANCH,
    head_branch: str = DEFAULT_HEAD_BRANCH,
    pr_number: int | None = None,
) -> dict[str, object]:
    """Close a full review pull request and delete its branches."""
    settings = Settings.load_from_env()
    with get_github_client(settings) as client:
        repository = Repository.from_slug(repo, client)
        deleted = _cleanup(repository, base_branch, head_branch, pr_number)
    return {"deleted_branches": deleted, "closed_pr": pr_number}


def github_branch_exists(repo: str, branch: str) -> dict[str, object]:
    """Report whether ``branch`` exists in ``repo``."""
    settings = Settings.load_from_env()
    with get_github_client(settings) as client:
        repository = Repository.from_slug(repo, client)
        return {"repo": repository.slug, "branch": branch, "exists": repository.branch_exists(branch)}
