"""Tests for the GitHub client."""

import asyncio
import json

import httpx
import pytest
from guidelint.github.client import GitHubClient, GitHubError


def _run(client: GitHubClient, call):
  async def run():
    async with client:
      return await call(client)

  return asyncio.run(run())


class TestGitHubClient:
  def test_has_token(self) -> None:
    assert GitHubClient(token="abc").has_token
    assert not GitHubClient().has_token

  def test_get_pull_request(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      if request.url.path.endswith("/files"):
        return httpx.Response(200, json=[
          {"filename": "a.py", "status": "added", "patch": "@@ -0,0 +1 @@\n+x"},
          {"filename": "b.py", "status": "removed", "patch": "@@ -1 +0,0 @@\n-x"},
        ])
      return httpx.Response(200, json={"number": 3, "title": "Fix", "state": "open"})

    client = GitHubClient(token="t", transport=httpx.MockTransport(handler))
    pr = _run(client, lambda c: c.get_pull_request("acme", "web", 3))

    assert pr.slug == "acme/web#3"
    assert pr.title == "Fix"
    assert [(f.path, f.is_deleted) for f in pr.files] == [
      ("a.py", False),
      ("b.py", True),
    ]

  def test_http_error_carries_context(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      return httpx.Response(404, json={"message": "Not Found"})

    client = GitHubClient(transport=httpx.MockTransport(handler))

    with pytest.raises(GitHubError) as exc_info:
      _run(client, lambda c: c.list_review_comments("acme", "web", 3))

    error = exc_info.value
    assert error.operation == "list review comments"
    assert error.target == "acme/web#3"
    assert error.status_code == 404
    assert "Not Found" in str(error)

  def test_transport_error_is_wrapped(self) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
      raise httpx.ConnectError("connection refused", request=request)

    client = GitHubClient(transport=httpx.MockTransport(handler))

    with pytest.raises(GitHubError) as exc_info:
      _run(client, lambda c: c.create_review("acme", "web", 3, []))

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

  def test_create_review_payload(self) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
      seen.append(request)
      return httpx.Response(200, json={"id": 1})

    client = GitHubClient(token="t", transport=httpx.MockTransport(handler))
    comments = [{"path": "a.py", "position": 2, "body": "x"}]
    _run(client, lambda c: c.create_review("acme", "web", 3, comments))

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/repos/acme/web/pulls/3/reviews"
    assert json.loads(request.content) == {"event": "COMMENT", "comments": comments}
