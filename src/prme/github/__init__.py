"""GitHub API integration."""

from .api import github_request
from .auth import get_github_client
from .repository import PullRequest, Repository, parse_repo_slug

__all__ = [
    "get_github_client",
    "github_request",
    "parse_repo_slug",
    "PullRequest",
    "Repository",
]
