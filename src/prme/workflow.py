"""Full pull request workflow.

The workflow turns a ``WorkflowConfig`` into a pull request that shows the
whole content of a repository as a diff:

1. validate the configuration (no network call is made before this passes)
2. check the repository is reachable
3. check the full branch exists
4. check the base and head branches do not exist yet
5. create one empty-tree commit
6. create the base branch at that commit
7. create the head branch at the same commit
8. merge the full branch into the head branch
9. open a pull request from the head branch into the base branch

Steps run strictly in order and any failure stops the run.  Nothing is rolled
back: branches created before a failure are named in the error so that the
operator can delete them, for example with ``cleanup_full_pull_request``.
Rerunning with the same branch names fails at step 4 until they are removed.
"""

from __future__ import annotations

import logging

import httpx

from .config import Settings, WorkflowConfig
from .errors import ConfigError, GitHubAPIError, PreconditionError
from .github.auth import get_github_client
from .github.repository import PullRequest, Repository, parse_repo_slug

logger = logging.getLogger(__name__)

TOTAL_STEPS = 9


class FullPullRequestCreator:
    """Create a full review pull request for one ``WorkflowConfig``."""

    def __init__(
        self,
        config: WorkflowConfig,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config
        self.settings = settings
        self.transport = transport

    def create(self) -> PullRequest:
        """Run the workflow and return the created pull request."""
        self.config.validate()
        owner, name = parse_repo_slug(self.config.repo)
        _step(1, "configuration is valid for %s/%s", owner, name)

        with get_github_client(self.settings, self.transport) as client:
            repository = Repository(owner=owner, name=name, client=client)
            return self.create_in(repository)

    def create_in(self, repository: Repository) -> PullRequest:
        """Run steps 2 to 9 against an already-bound ``repository``."""
        config = self.config

        _step(2, "checking repository %s", repository)
        if not repository.exists():
            raise PreconditionError(
                f"repository {repository.slug!r} does not exist or the access token does not provide access"
            )

        _step(3, "checking full branch %s", config.full_branch)
        if not repository.branch_exists(config.full_branch):
            raise PreconditionError(
                f"full repository branch {config.full_branch!r} does not exist in repository {repository.slug!r}"
            )

        _step(4, "checking branches %s and %s are free", config.base_branch, config.head_branch)
        if repository.branch_exists(config.base_branch):
            raise PreconditionError(
                f"base branch {config.base_branch!r} already exists in repository {repository.slug!r}"
            )
        if repository.branch_exists(config.head_branch):
            raise PreconditionError(
                f"head branch {config.head_branch!r} already exists in repository {repository.slug!r}"
            )

        _step(5, "creating empty-tree commit")
        sha = repository.create_empty_tree_commit()

        created: list[str] = []
        try:
            _step(6, "creating base branch %s at %s", config.base_branch, sha)
            repository.create_branch(config.base_branch, sha)
            created.append(config.base_branch)

            _step(7, "creating head branch %s at %s", config.head_branch, sha)
            repository.create_branch(config.head_branch, sha)
            created.append(config.head_branch)

            _step(8, "merging %s into %s", config.full_branch, config.head_branch)
            repository.merge_branch(config.head_branch, config.full_branch)

            _step(9, "opening pull request %s <- %s", config.base_branch, config.head_branch)
            pull_request = repository.create_pull_request(
                config.title, config.body, config.base_branch, config.head_branch
            )
        except GitHubAPIError as exc:
            if not created:
                raise
            leftover = ", ".join(repr(b) for b in created)
            raise type(exc)(
                f"{exc} (branches left behind in repository {repository.slug!r}: {leftover})",
                operation=exc.operation,
                status_code=exc.status_code,
            ) from exc

        logger.info("Created full pull request %s", pull_request.url)
        return pull_request


def _step(number: int, message: str, *args: object) -> None:
    logger.info("step %d/%d: " + message, number, TOTAL_STEPS, *args)


def create_full_pull_request(
    config: WorkflowConfig,
    settings: Settings,
    transport: httpx.BaseTransport | None = None,
) -> PullRequest:
    """Convenience wrapper around ``FullPullRequestCreator.create``."""
    return FullPullRequestCreator(config, settings, transport).create()


def cleanup_full_pull_request(
    repository: Repository,
    base_branch: str,
    head_branch: str,
    pr_number: int | None = None,
) -> list[str]:
    """Close a full review pull request and delete its branches.

    The pull request is closed first (when ``pr_number`` is given) so that
    deleting its head branch does not leave it dangling.  Branches that do
    not exist are skipped.  Returns the names of the deleted branches.
    """
    if not base_branch or not head_branch:
        raise ConfigError("the base branch and head branch names cannot be empty")
    if pr_number is not None:
        repository.close_pull_request(pr_number)
    deleted: list[str] = []
    for branch in (head_branch, base_branch):
        if repository.branch_exists(branch):
            repository.delete_branch(branch)
            deleted.append(branch)
        else:
            logger.info("Branch %s does not exist in %s, skipping", branch, repository)
    return deleted
