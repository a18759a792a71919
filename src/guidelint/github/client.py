"""Minimal async GitHub REST client for pull request review."""

import logging
from typing import Any

import httpx

from guidelint.models import FileDiff, PullRequest

logger = logging.getLogger(__name__)


class GitHubError(Exception):
  """A GitHub API call failed."""

  def __init__(
    self,
    operation: str,
    target: str,
    message: str,
    status_code: int | None = None,
  ):
    status = f" ({status_code})" if status_code is not None else ""
    super().__init__(f"{operation} for {target} failed{status}: {message}")
    self.operation = operation
    self.target = target
    self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
  try:
    data = response.json()
  except ValueError:
    return response.text[:200] or response.reason_phrase
  if isinstance(data, dict) and data.get("message"):
    return str(data["message"])
  return response.reason_phrase


class GitHubClient:
  """Async client for the pull request endpoints guidelint needs.

  Calls are made one at a time; pagination is sequential.
  """

  DEFAULT_API_URL = "https://api.github.com"
  DEFAULT_TIMEOUT = 30.0
  MAX_FILE_PAGES = 30

  def __init__(
    self,
    token: str | None = None,
    api_url: str = DEFAULT_API_URL,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
  ):
    self._token = token
    headers = {
      "Accept": "application/vnd.github+json",
      "X-GitHub-Api-Version": "2022-11-28",
    }
    if token:
      headers["Authorization"] = f"Bearer {token}"
    self._client = httpx.AsyncClient(
      base_url=api_url.rstrip("/"),
      headers=headers,
      timeout=timeout,
      transport=transport,
    )

  @property
  def has_token(self) -> bool:
    return bool(self._token)

  async def __aenter__(self) -> "GitHubClient":
    return self

  async def __aexit__(self, *exc_info: object) -> None:
    await self.aclose()

  async def aclose(self) -> None:
    await self._client.aclose()

  async def _request(
    self,
    operation: str,
    target: str,
    method: str,
    url: str,
    **kwargs: Any,
  ) -> Any:
    try:
      response = await self._client.request(method, url, **kwargs)
    except httpx.RequestError as e:
      raise GitHubError(operation, target, str(e) or type(e).__name__) from e

    if response.is_error:
      raise GitHubError(
        operation, target, _error_message(response), response.status_code
      )
    return response.json()

  async def get_pull_request(
    self,
    owner: str,
    repo: str,
    number: int,
    per_page: int = 100,
  ) -> PullRequest:
    """Fetch pull request metadata and the patches of its changed files."""
    target = f"{owner}/{repo}#{number}"
    data = await self._request(
      "get pull request", target, "GET", f"/repos/{owner}/{repo}/pulls/{number}"
    )
    files = await self.list_files(owner, repo, number, per_page=per_page)
    return PullRequest(
      owner=owner,
      repo=repo,
      number=int(data.get("number", number)),
      title=data.get("title") or "",
      state=data.get("state") or "",
      body=data.get("body") or "",
      files=files,
    )

  async def list_files(
    self,
    owner: str,
    repo: str,
    number: int,
    per_page: int = 100,
  ) -> list[FileDiff]:
    target = f"{owner}/{repo}#{number}"
    files: list[FileDiff] = []
    for page in range(1, self.MAX_FILE_PAGES + 1):
      data = await self._request(
        "list pull request files", target, "GET",
        f"/repos/{owner}/{repo}/pulls/{number}/files",
        params={"per_page": per_page, "page": page},
      )
      for item in data:
        status = item.get("status", "")
        files.append(FileDiff(
          path=item["filename"],
          content=item.get("patch") or "",
          is_deleted=status == "removed",
        ))
      if len(data) < per_page:
        break
    return files

  async def list_review_comments(
    self,
    owner: str,
    repo: str,
    number: int,
    page: int = 1,
    per_page: int = 100,
  ) -> list[dict[str, Any]]:
    """Fetch one page of inline review comments."""
    logger.debug("Listing review comments for %s/%s#%d page %d", owner, repo, number, page)
    return await self._request(
      "list review comments", f"{owner}/{repo}#{number}", "GET",
      f"/repos/{owner}/{repo}/pulls/{number}/comments",
      params={"per_page": per_page, "page": page},
    )

  async def create_review(
    self,
    owner: str,
    repo: str,
    number: int,
    comments: list[dict[str, Any]],
    event: str = "COMMENT",
  ) -> dict[str, Any]:
    """Submit one review carrying inline comments."""
    return await self._request(
      "create review", f"{owner}/{repo}#{number}", "POST",
      f"/repos/{owner}/{repo}/pulls/{number}/reviews",
      json={"event": event, "comments": comments},
    )
