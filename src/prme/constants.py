"""Global constants for prme.

These values serve as defaults for configuration and the GitHub transport.
Changing these values is discouraged; instead override environment variables
as needed.
"""

# GitHub API
DEFAULT_API_URL = "https://api.github.com"
HTTP_TIMEOUT_S = 10.0

# Well-known SHA of the tree with no entries
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
EMPTY_TREE_COMMIT_MESSAGE = "empty-tree commit"

# Workflow defaults
DEFAULT_FULL_BRANCH = "main"
DEFAULT_TITLE = "Full Review"
DEFAULT_BODY = (
    "A full review of the entire repository. When this PR is complete, be sure "
    "to manually merge its base branch into the main branch for this repository."
)
DEFAULT_BASE_BRANCH = "prme-full-review"
DEFAULT_HEAD_BRANCH = "prme-full-content"

# Prefix of environment variables overriding the workflow defaults
ENV_PREFIX = "PRME_"

# Logging
DEFAULT_LOG_LEVEL = "INFO"
