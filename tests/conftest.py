"""Pytest configuration and fixtures for prme tests.

This module provides two fake GitHub APIs built on ``httpx.MockTransport`` so
that no test talks to the network:

- ``ScriptedGitHub`` answers each (method, path) with queued responses and
  records every request.  Unit tests use it to pin down exact call
  sequences.
- ``FakeGitHubRepo`` keeps branches, commits and pull requests in memory and
  implements the endpoints the workflow uses.  Integration tests use it to
  check end-to-end state.
"""

from __future__ import annotations

import json
import os

# Keep a developer's real token out of the tests
os.environ.pop("GH_TOKEN", None)
os.environ.pop("GITHUB_TOKEN", None)

import hashlib
from collections import defaultdict, deque
from collections.abc import Callable

import httpx
import pytest

from prme.config import Settings
from prme.github.auth import get_github_client
from prme.github.repository import Repository

TEST_TOKEN = "ghp_" + "x" * 36
API_URL = "https://api.github.com"


class ScriptedGitHub:
    """A fake GitHub API replying with pre-programmed responses."""

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], deque[httpx.Response]] = defaultdict(deque)
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int, json: object | None = None) -> ScriptedGitHub:
        """Queue a response for the next ``method`` request to ``path``."""
        if json is None:
            response = httpx.Response(status)
        else:
            response = httpx.Response(status, json=json)
        self._responses[(method, path)].append(response)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._responses.get((request.method, request.url.path))
        if not queue:
            raise AssertionError(f"unexpected request {request.method} {request.url.path}")
        return queue.popleft()

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def body(self, index: int) -> dict[str, object]:
        return json.loads(self.requests[index].content)

    def bodies(self, method: str, path: str) -> list[dict[str, object]]:
        return [json.loads(r.content) for r in self.requests if (r.method, r.url.path) == (method, path)]

    def happy_path(
        self,
        slug: str = "o/r",
        full_branch: str = "main",
        base_branch: str = "rev-base",
        head_branch: str = "rev-head",
        sha: str = "828e2e09e5a8d4b2a3c8c1c0a7b6f5e4d3c2b1a0",
        pr_number: int = 7,
        pr_url: str = "https://host/o/r/pull/7",
    ) -> ScriptedGitHub:
        """Queue responses for a run in which every step succeeds."""
        self.add("GET", f"/repos/{slug}", 200, {"full_name": slug})
        self.add("GET", f"/repos/{slug}/branches/{full_branch}", 200, {"name": full_branch})
        self.add("GET", f"/repos/{slug}/branches/{base_branch}", 404, {"message": "Branch not found"})
        self.add("GET", f"/repos/{slug}/branches/{head_branch}", 404, {"message": "Branch not found"})
        self.add("POST", f"/repos/{slug}/git/commits", 201, {"sha": sha})
        self.add("POST", f"/repos/{slug}/git/refs", 201, {"ref": f"refs/heads/{base_branch}"})
        self.add("POST", f"/repos/{slug}/git/refs", 201, {"ref": f"refs/heads/{head_branch}"})
        self.add("POST", f"/repos/{slug}/merges", 201, {"sha": "f" * 40})
        self.add("POST", f"/repos/{slug}/pulls", 201, {"number": pr_number, "html_url": pr_url})
        return self


class FakeGitHubRepo:
    """An in-memory GitHub repository speaking the REST endpoints prme uses."""

    def __init__(self, slug: str = "o/r", branches: dict[str, str] | None = None) -> None:
        self.slug = slug
        self.branches: dict[str, str] = dict(branches or {"main": "a" * 40})
        self.commits: dict[str, dict[str, object]] = {
            sha: {"tree": "t" * 40, "parents": []} for sha in self.branches.values()
        }
        self.pulls: dict[int, dict[str, object]] = {}
        self.on_merge: Callable[[FakeGitHubRepo], None] | None = None
        self.fail: dict[tuple[str, str], int] = {}
        self.requests: list[tuple[str, str]] = []

    def _new_commit(self, tree: str, parents: list[str]) -> str:
        sha = hashlib.sha1(f"{tree}{parents}{len(self.commits)}".encode()).hexdigest()
        self.commits[sha] = {"tree": tree, "parents": parents}
        return sha

    def handler(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.requests.append((method, path))
        if (method, path) in self.fail:
            return httpx.Response(self.fail[(method, path)], json={"message": "Injected failure"})
        prefix = f"/repos/{self.slug}"
        if not path.startswith(prefix):
            return httpx.Response(404, json={"message": "Not Found"})
        rest = path[len(prefix):]
        payload = json.loads(request.content) if request.content else {}

        if method == "GET" and rest == "":
            return httpx.Response(200, json={"full_name": self.slug})
        if method == "GET" and rest.startswith("/branches/"):
            name = rest[len("/branches/"):]
            if name not in self.branches:
                return httpx.Response(404, json={"message": "Branch not found"})
            return httpx.Response(200, json={"name": name, "commit": {"sha": self.branches[name]}})
        if method == "GET" and rest.startswith("/git/commits/"):
            sha = rest[len("/git/commits/"):]
            if sha not in self.commits:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"sha": sha})
        if method == "POST" and rest == "/git/commits":
            sha = self._new_commit(payload["tree"], payload["parents"])
            return httpx.Response(201, json={"sha": sha, "tree": {"sha": payload["tree"]}})
        if method == "POST" and rest == "/git/refs":
            name = payload["ref"].removeprefix("refs/heads/")
            if name in self.branches:
                return httpx.Response(422, json={"message": "Reference already exists"})
            if payload["sha"] not in self.commits:
                return httpx.Response(422, json={"message": "Object does not exist"})
            self.branches[name] = payload["sha"]
            return httpx.Response(201, json={"ref": payload["ref"]})
        if method == "POST" and rest == "/merges":
            base, head = payload["base"], payload["head"]
            if base not in self.branches or head not in self.branches:
                return httpx.Response(404, json={"message": "Base or head does not exist"})
            if self.on_merge is not None:
                self.on_merge(self)
            tree = self.commits[self.branches[head]]["tree"]
            sha = self._new_commit(tree, [self.branches[base], self.branches[head]])
            self.branches[base] = sha
            return httpx.Response(201, json={"sha": sha})
        if method == "POST" and rest == "/pulls":
            number = len(self.pulls) + 1
            self.pulls[number] = {**payload, "state": "open"}
            return httpx.Response(
                201, json={"number": number, "html_url": f"https://github.com/{self.slug}/pull/{number}"}
            )
        if method == "PATCH" and rest.startswith("/pulls/"):
            number = int(rest[len("/pulls/"):])
            if number not in self.pulls:
                return httpx.Response(404, json={"message": "Not Found"})
            self.pulls[number]["state"] = payload["state"]
            return httpx.Response(200, json={"number": number, "state": payload["state"]})
        if method == "DELETE" and rest.startswith("/git/refs/heads/"):
            name = rest[len("/git/refs/heads/"):]
            if self.branches.pop(name, None) is None:
                return httpx.Response(422, json={"message": "Reference does not exist"})
            return httpx.Response(204)
        return httpx.Response(404, json={"message": "Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def settings() -> Settings:
    return Settings(github_token=TEST_TOKEN, api_url=API_URL, timeout_s=5.0)


@pytest.fixture
def scripted() -> ScriptedGitHub:
    return ScriptedGitHub()


@pytest.fixture
def fake_repo() -> FakeGitHubRepo:
    return FakeGitHubRepo()


@pytest.fixture
def repository(settings: Settings, scripted: ScriptedGitHub):
    """A ``Repository`` for ``o/r`` bound to the scripted fake."""
    with get_github_client(settings, scripted.transport) as client:
        yield Repository(owner="o", name="r", client=client)


@pytest.fixture
def patch_clients(mocker, settings: Settings):
    """Route every client prme creates to ``transport``.

    Returns a function taking the transport to use.
    """

    def _patch(transport: httpx.BaseTransport) -> None:
        def _client(_settings: Settings, _transport: httpx.BaseTransport | None = None) -> httpx.Client:
            return get_github_client(settings, transport)

        for target in (
            "prme.workflow.get_github_client",
            "prme.cli.get_github_client",
            "prme.tools.review_tools.get_github_client",
        ):
            mocker.patch(target, side_effect=_client)

    return _patch


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up basic test environment."""
    monkeypatch.setenv("GH_TOKEN", TEST_TOKEN)
    for suffix in ("FBRANCH", "TITLE", "BODY", "BBRANCH", "HBRANCH", "API_URL", "TIMEOUT_S"):
        monkeypatch.delenv(f"PRME_{suffix}", raising=False)
