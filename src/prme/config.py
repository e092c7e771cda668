"""Configuration loading for prme.

Two kinds of configuration exist:

- ``Settings`` holds process-level values (the GitHub token, API URL, request
  timeout, log level).  ``Settings.load_from_env`` loads a `.env` file using
  `python-dotenv` and reads the environment.
- ``WorkflowConfig`` holds the inputs of one full pull request run.  It is
  resolved by ``resolve_workflow_config`` from, in increasing precedence,
  built-in defaults, ``PRME_*`` environment variables and explicit values.

Environment variables:
- GH_TOKEN (required, falls back to GITHUB_TOKEN)
- PRME_API_URL (default: 'https://api.github.com')
- PRME_TIMEOUT_S (default: 10)
- PRME_FBRANCH, PRME_TITLE, PRME_BODY, PRME_BBRANCH, PRME_HBRANCH
- LOG_LEVEL (default: 'INFO')
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields

from dotenv import load_dotenv

from .constants import (
    DEFAULT_API_URL,
    DEFAULT_BASE_BRANCH,
    DEFAULT_BODY,
    DEFAULT_FULL_BRANCH,
    DEFAULT_HEAD_BRANCH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TITLE,
    ENV_PREFIX,
    HTTP_TIMEOUT_S,
)
from .errors import ConfigError

# Environment variable suffix (after ``PRME_``) for each workflow field.  The
# suffixes match the command-line flag names.
ENV_FIELD_NAMES: dict[str, str] = {
    "full_branch": "FBRANCH",
    "title": "TITLE",
    "body": "BODY",
    "base_branch": "BBRANCH",
    "head_branch": "HBRANCH",
}


@dataclass(frozen=True)
class Settings:
    """Process-level configuration values loaded from the environment."""

    github_token: str
    api_url: str = DEFAULT_API_URL
    timeout_s: float = HTTP_TIMEOUT_S
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def load_from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Load settings from environment variables.

        The `.env` file is loaded if present (without overriding variables
        already set).  Raises ``ConfigError`` if no token is available.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        github_token = environ.get("GH_TOKEN") or environ.get("GITHUB_TOKEN")
        if not github_token:
            raise ConfigError(
                "Please set the GH_TOKEN environment variable to a GitHub personal access token. "
                "Tokens can be managed at https://github.com/settings/tokens"
            )

        timeout_raw = environ.get("PRME_TIMEOUT_S")
        try:
            timeout_s = float(timeout_raw) if timeout_raw else HTTP_TIMEOUT_S
        except ValueError as exc:
            raise ConfigError(f"PRME_TIMEOUT_S must be a number of seconds, got {timeout_raw!r}") from exc

        return cls(
            github_token=github_token,
            api_url=(environ.get("PRME_API_URL") or DEFAULT_API_URL).rstrip("/"),
            timeout_s=timeout_s,
            log_level=environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )


@dataclass(frozen=True)
class WorkflowConfig:
    """Inputs of one full pull request run."""

    repo: str
    full_branch: str = DEFAULT_FULL_BRANCH
    title: str = DEFAULT_TITLE
    body: str = DEFAULT_BODY
    base_branch: str = DEFAULT_BASE_BRANCH
    head_branch: str = DEFAULT_HEAD_BRANCH

    def validate(self) -> None:
        """Raise ``ConfigError`` unless every field is usable.

        All fields must be non-empty, and the two branches created by the
        workflow must differ from each other and from the full branch.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"the {f.name.replace('_', ' ')} cannot be empty")
        if self.base_branch == self.head_branch:
            raise ConfigError(
                f"the base branch and head branch must differ, both are {self.base_branch!r}"
            )
        for name in ("base_branch", "head_branch"):
            if getattr(self, name) == self.full_branch:
                raise ConfigError(
                    f"the {name.replace('_', ' ')} must differ from the full branch {self.full_branch!r}"
                )


def env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    """Return workflow fields set by non-empty ``PRME_*`` environment variables."""
    overrides: dict[str, str] = {}
    for field_name, suffix in ENV_FIELD_NAMES.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value:
            overrides[field_name] = value
    return overrides


def resolve_workflow_config(
    repo: str,
    explicit: Mapping[str, str | None] | None = None,
    environ: Mapping[str, str] | None = None,
) -> WorkflowConfig:
    """Merge defaults, environment and explicit values into a ``WorkflowConfig``.

    Explicit values of ``None`` are ignored so that unset command-line flags
    fall through to the environment and then to the defaults.  The result is
    not validated; ``WorkflowConfig.validate`` is called by the workflow.
    """
    if environ is None:
        environ = os.environ
    values: dict[str, str] = {}
    values.update(env_overrides(environ))
    for key, value in (explicit or {}).items():
        if key not in ENV_FIELD_NAMES:
            raise ConfigError(f"unknown workflow option {key!r}")
        if value is not None:
            values[key] = value
    return WorkflowConfig(repo=repo, **values)
