"""Secret redaction utilities.

This module removes the GitHub token from text before it is logged or shown
to the operator.  Redaction is a simple string replacement that substitutes
secrets with the string ``"<REDACTED>"``.  Commit SHAs and other identifiers
are left intact because error messages must name them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_TOKEN_PATTERNS = [
    # GitHub personal access tokens: ghp_xxx or github_pat_xxx
    re.compile(r"gh[pousr]_[A-Za-z0-9]{30,}", re.IGNORECASE),
    re.compile(r"github_pat_[A-Za-z0-9_]{20,}", re.IGNORECASE),
    # Authorization header values
    re.compile(r"Authorization:\s*(token|Bearer)\s+[A-Za-z0-9\-\._~\+/]+=*", re.IGNORECASE),
]


def redact_secrets(text: str, secrets: Iterable[str] = ()) -> str:
    """Return ``text`` with secrets and GitHub token patterns replaced.

    :param text: arbitrary text that may contain secrets
    :param secrets: iterable of secret strings to redact
    :return: redacted text
    """
    redacted = text or ""
    for secret in secrets:
        if secret:
            redacted = redacted.replace(secret, "<REDACTED>")
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub("<REDACTED>", redacted)
    return redacted
