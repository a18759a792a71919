"""Pytest fixtures."""

import json
from pathlib import Path

import httpx
import pytest
from guidelint.github.client import GitHubClient
from guidelint.models import Finding, Severity

TODO_RULES = """---
title: No TODO markers
severity: warning
category: maintainability
filePatterns: ["**/*"]
rules:
  - id: no-todo
    pattern: "\\\\bTODO\\\\b"
    message: Avoid TODO comments.
---
Track work in issues instead of comments.
"""

MEMO_RULES = """---
title: React performance
severity: info
category: performance
filePatterns:
  - "**/*.ts"
  - "**/*.tsx"
rules:
  - id: memo-derived
    pattern: "\\\\.filter\\\\("
    negativePattern: "useMemo\\\\s*\\\\("
    message: Wrap derived arrays in useMemo.
    severity: warning
---
"""

BROKEN_RULES = """---
title: Broken
severity: error
"""


@pytest.fixture
def sample_patch() -> str:
  return "@@ -1,2 +1,3 @@\n context\n+line with TODO marker\n+safe line\n"


@pytest.fixture
def rules_dir(tmp_path: Path) -> Path:
  directory = tmp_path / "rules"
  directory.mkdir()
  (directory / "todo.md").write_text(TODO_RULES)
  (directory / "react-performance.md").write_text(MEMO_RULES)
  return directory


@pytest.fixture
def sample_findings() -> list[Finding]:
  return [
    Finding(
      path="src/app.ts",
      position=2,
      message="Avoid TODO comments.",
      rule_id="no-todo",
      severity=Severity.WARNING,
    ),
    Finding(
      path="src/app.ts",
      position=7,
      message="Wrap derived arrays in useMemo.",
      rule_id="memo-derived",
      severity=Severity.INFO,
    ),
  ]


@pytest.fixture
def todo_rules_text() -> str:
  return TODO_RULES


@pytest.fixture
def broken_rules_text() -> str:
  return BROKEN_RULES


class FakeGitHub:
  """In-memory stand-in for the GitHub pull request endpoints."""

  def __init__(self) -> None:
    self.comments: list[dict] = []
    self.files: list[dict] = []
    self.pull = {"number": 7, "title": "Add list view", "state": "open", "body": ""}
    self.requests: list[httpx.Request] = []
    self.fail_review_after: int | None = None
    self.fail_listing = False
    self.reviews_created = 0

  def handler(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    path = request.url.path
    page = int(request.url.params.get("page", 1))
    per_page = int(request.url.params.get("per_page", 30))

    if request.method == "GET" and path.endswith("/comments"):
      if self.fail_listing:
        return httpx.Response(502, json={"message": "Bad Gateway"})
      start = (page - 1) * per_page
      return httpx.Response(200, json=self.comments[start:start + per_page])

    if request.method == "GET" and path.endswith("/files"):
      start = (page - 1) * per_page
      return httpx.Response(200, json=self.files[start:start + per_page])

    if request.method == "GET" and "/pulls/" in path:
      return httpx.Response(200, json=self.pull)

    if request.method == "POST" and path.endswith("/reviews"):
      if self.fail_review_after is not None and self.reviews_created >= self.fail_review_after:
        return httpx.Response(422, json={"message": "Unprocessable Entity"})
      payload = json.loads(request.content)
      for comment in payload["comments"]:
        self.comments.append({"id": len(self.comments) + 1, **comment})
      self.reviews_created += 1
      return httpx.Response(200, json={"id": self.reviews_created})

    return httpx.Response(404, json={"message": "Not Found"})

  def mutating_requests(self) -> list[httpx.Request]:
    return [r for r in self.requests if r.method != "GET"]

  def client(self, token: str | None = "test-token") -> GitHubClient:
    return GitHubClient(token=token, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_github() -> FakeGitHub:
  return FakeGitHub()
