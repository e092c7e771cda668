"""Command-line entrypoint for prme.

Usage:

    export GH_TOKEN='ghp_.....'
    prme [flags] OwnerName/RepositoryName
    prme cleanup [flags] OwnerName/RepositoryName

Flags left unset fall back to the PRME_FBRANCH, PRME_TITLE, PRME_BODY,
PRME_BBRANCH and PRME_HBRANCH environment variables, then to the built-in
defaults.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from . import __version__
from .config import ENV_FIELD_NAMES, Settings, resolve_workflow_config
from .constants import ENV_PREFIX
from .errors import PrmeError
from .github.auth import get_github_client
from .github.repository import Repository
from .policy.redaction import redact_secrets
from .telemetry.logger import configure_logging
from .workflow import FullPullRequestCreator, cleanup_full_pull_request

DESCRIPTION = """\
Create a pull request that reviews all content of a GitHub repository.

The GH_TOKEN environment variable must be set to a GitHub personal access
token. To create a token, see https://github.com/settings/tokens
"""


def _env_help(field_name: str) -> str:
    return f"Also set via the {ENV_PREFIX}{ENV_FIELD_NAMES[field_name]} environment variable."


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prme",
        description=DESCRIPTION,
        epilog="Run 'prme cleanup -h' to remove the branches of a review pull request.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s version {__version__}")
    parser.add_argument(
        "--fbranch",
        dest="full_branch",
        help="Existing branch, such as main or master, containing all repository content. "
        + _env_help("full_branch"),
    )
    parser.add_argument("--title", help="Title of the pull request. " + _env_help("title"))
    parser.add_argument("--body", help="Body (first comment) of the pull request. " + _env_help("body"))
    parser.add_argument(
        "--bbranch",
        dest="base_branch",
        help="Name of the base orphan branch to create. " + _env_help("base_branch"),
    )
    parser.add_argument(
        "--hbranch",
        dest="head_branch",
        help="Name of the head review branch to create, where review fixes should be pushed. "
        + _env_help("head_branch"),
    )
    parser.add_argument("repo", help="Repository of the form OwnerName/RepositoryName")
    return parser


def build_cleanup_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="prme cleanup",
        description="Close a full review pull request and delete its base and head branches.",
    )
    parser.add_argument("--bbranch", dest="base_branch", help="Base branch to delete.")
    parser.add_argument("--hbranch", dest="head_branch", help="Head branch to delete.")
    parser.add_argument("--pr", dest="pr_number", type=int, help="Number of the pull request to close first.")
    parser.add_argument("repo", help="Repository of the form OwnerName/RepositoryName")
    return parser


def _run_create(args: argparse.Namespace, settings: Settings) -> int:
    config = resolve_workflow_config(
        args.repo,
        explicit={name: getattr(args, name) for name in ENV_FIELD_NAMES},
    )
    pull_request = FullPullRequestCreator(config, settings).create()
    print(f"A full pull request has been created at {pull_request.url}")
    return 0


def _run_cleanup(args: argparse.Namespace, settings: Settings) -> int:
    # Branch names resolve the same way as for creation
    config = resolve_workflow_config(
        args.repo,
        explicit={"base_branch": args.base_branch, "head_branch": args.head_branch},
    )
    with get_github_client(settings) as client:
        repository = Repository.from_slug(config.repo, client)
        deleted = cleanup_full_pull_request(
            repository,
            config.base_branch,
            config.head_branch,
            args.pr_number,
        )
    if args.pr_number is not None:
        print(f"Closed pull request #{args.pr_number} in {repository}")
    for branch in deleted:
        print(f"Deleted branch {branch} in {repository}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == "cleanup":
        args = build_cleanup_parser().parse_args(argv[1:])
        run = _run_cleanup
    else:
        args = build_parser().parse_args(argv)
        run = _run_create

    settings: Settings | None = None
    try:
        settings = Settings.load_from_env()
        configure_logging(settings.log_level)
        return run(args, settings)
    except PrmeError as exc:
        secrets = [settings.github_token] if settings else []
        print(redact_secrets(str(exc), secrets), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
