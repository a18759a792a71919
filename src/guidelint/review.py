"""Core review orchestration."""

import logging
import re
from pathlib import Path
from typing import Sequence

from guidelint.config import Settings, load_config
from guidelint.diff import extract_branch_diff, extract_staged_diff
from guidelint.github import AnnotationPoster, GitHubClient, MissingTokenError
from guidelint.models import FileDiff, PullRequest, ReviewReport
from guidelint.rules import BUILTIN_DOCUMENTS, RuleEngine, RuleStore

logger = logging.getLogger(__name__)

_PR_URL = re.compile(r"github\.com/([^/\s]+)/([^/\s]+)/pull/(\d+)", re.IGNORECASE)
_PR_SHORT = re.compile(r"^([\w.-]+)/([\w.-]+)#(\d+)$")


class InvalidPullRequestUrl(ValueError):
  """Pull request reference could not be parsed."""


def parse_pull_request_url(reference: str) -> tuple[str, str, int]:
  """Parse a PR URL or ``owner/repo#123`` into (owner, repo, number)."""
  reference = reference.strip()
  match = _PR_URL.search(reference) or _PR_SHORT.match(reference)
  if not match:
    raise InvalidPullRequestUrl(
      f"Invalid pull request reference: {reference!r} "
      "(expected https://github.com/owner/repo/pull/123 or owner/repo#123)"
    )
  return match.group(1), match.group(2), int(match.group(3))


def build_store(settings: Settings) -> RuleStore:
  """Build and load a fresh rule store for one review."""
  builtins = BUILTIN_DOCUMENTS if settings.builtin_rules else ()
  store = RuleStore(settings.rules_dir, builtins=builtins)
  store.load()
  return store


def _reviewable(files: Sequence[FileDiff]) -> list[FileDiff]:
  return [f for f in files if f.content and not f.is_deleted]


def review_diff(files: Sequence[FileDiff], store: RuleStore, target: str = "local") -> ReviewReport:
  """Review locally produced file diffs. Never posts."""
  reviewable = _reviewable(files)
  findings = RuleEngine(store).review_files(reviewable)
  return ReviewReport(
    target=target,
    findings=findings,
    rules_loaded=len(store.documents),
    files_reviewed=len(reviewable),
  )


async def review_pull_request(
  reference: str,
  settings: Settings,
  client: GitHubClient | None = None,
) -> ReviewReport:
  """Review a pull request and post new findings in the configured mode.

  Args:
    reference: PR URL or ``owner/repo#number``.
    settings: Effective settings; ``dry_run`` gates posting.
    client: Client to use instead of one built from settings.

  Returns:
    ReviewReport with findings at diff positions and the post outcome.

  Raises:
    MissingTokenError: Live mode without a token, before any request.
  """
  owner, repo, number = parse_pull_request_url(reference)
  has_token = client.has_token if client is not None else bool(settings.github_token)
  if not settings.dry_run and not has_token:
    raise MissingTokenError("GITHUB_TOKEN is required to post comments")

  store = build_store(settings)

  own_client = client is None
  if client is None:
    client = GitHubClient(
      token=settings.github_token,
      api_url=settings.api_url,
      timeout=settings.timeout,
    )

  try:
    pr: PullRequest = await client.get_pull_request(
      owner, repo, number, per_page=settings.per_page
    )
    report = review_diff(pr.files, store, target=pr.slug)
    logger.debug("%s: %d findings in %d files", pr.slug, len(report.findings), report.files_reviewed)

    outcome = None
    if report.findings:
      poster = AnnotationPoster(
        client,
        batch_size=settings.batch_size,
        per_page=settings.per_page,
        max_pages=settings.max_comment_pages,
      )
      outcome = await poster.post(
        owner, repo, number, report.findings, dry_run=settings.dry_run
      )
  finally:
    if own_client:
      await client.aclose()

  return ReviewReport(
    target=pr.slug,
    findings=report.findings,
    rules_loaded=report.rules_loaded,
    files_reviewed=report.files_reviewed,
    title=pr.title,
    state=pr.state,
    outcome=outcome,
  )


def run_check(
  settings: Settings,
  branch: str | None = None,
  base: str = "main",
  cwd: Path | None = None,
) -> ReviewReport:
  """Review staged changes, or a branch against its base."""
  if branch:
    files = extract_branch_diff(branch, base, cwd)
    target = f"{base}...{branch}"
  else:
    files = extract_staged_diff(cwd)
    target = "staged"
  return review_diff(files, build_store(settings), target=target)


def resolve_settings(
  config_path: Path | None = None,
  rules_dir: Path | None = None,
  builtin_rules: bool | None = None,
  dry_run: bool | None = None,
) -> Settings:
  """Load settings and apply explicit overrides."""
  settings = load_config(config_path).model_copy(deep=True)
  if rules_dir is not None:
    settings.rules_dir = rules_dir
  if builtin_rules is not None:
    settings.builtin_rules = builtin_rules
  if dry_run is not None:
    settings.dry_run = dry_run
  return settings
