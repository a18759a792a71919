"""Idempotent posting of findings as inline review comments."""

import logging
from typing import Sequence

from guidelint.github.client import GitHubClient, GitHubError
from guidelint.github.signature import (
  compute_signature,
  extract_signature,
  format_comment_body,
)
from guidelint.models import Finding, PostOutcome

logger = logging.getLogger(__name__)


class MissingTokenError(Exception):
  """Live posting requested without a GitHub token."""


class SubmissionError(GitHubError):
  """A review batch failed; earlier batches may already be posted."""

  def __init__(self, cause: GitHubError, batch: int, total_batches: int, posted: int):
    super().__init__(
      cause.operation,
      cause.target,
      f"batch {batch}/{total_batches} rejected after {posted} comments were "
      f"posted: {cause}",
      cause.status_code,
    )
    self.batch = batch
    self.total_batches = total_batches
    self.posted = posted


def chunk(items: Sequence[Finding], size: int) -> list[list[Finding]]:
  return [list(items[i:i + size]) for i in range(0, len(items), size)]


class AnnotationPoster:
  """Posts findings as review comments, skipping ones already on the PR.

  Already-posted findings are recognized by the signature trailer in the
  existing comment bodies. Pages and batches go out strictly one after
  another, so a batch never races the listing of another.

  A failed batch is raised as SubmissionError. Batches before it stay
  posted; nothing is retried or rolled back.
  """

  BATCH_SIZE = 50
  PER_PAGE = 100
  MAX_PAGES = 10

  def __init__(
    self,
    client: GitHubClient,
    batch_size: int = BATCH_SIZE,
    per_page: int = PER_PAGE,
    max_pages: int = MAX_PAGES,
  ):
    self.client = client
    self.batch_size = batch_size
    self.per_page = per_page
    self.max_pages = max_pages

  async def existing_signatures(self, owner: str, repo: str, number: int) -> set[str]:
    """Collect signatures from existing inline comments, up to max_pages."""
    signatures: set[str] = set()
    for page in range(1, self.max_pages + 1):
      comments = await self.client.list_review_comments(
        owner, repo, number, page=page, per_page=self.per_page
      )
      for comment in comments:
        signature = extract_signature(comment.get("body"))
        if signature:
          signatures.add(signature)
      if len(comments) < self.per_page:
        break
    return signatures

  async def post(
    self,
    owner: str,
    repo: str,
    number: int,
    findings: Sequence[Finding],
    dry_run: bool = True,
  ) -> PostOutcome:
    """Post findings not already present on the pull request.

    Raises:
      MissingTokenError: Live mode without a token, before any request.
      GitHubError: Listing existing comments failed.
      SubmissionError: A review batch failed.
    """
    if not findings:
      return PostOutcome(dry_run=dry_run)

    if not dry_run and not self.client.has_token:
      raise MissingTokenError("GITHUB_TOKEN is required to post comments")

    existing = await self.existing_signatures(owner, repo, number)
    fresh = [f for f in findings if compute_signature(f) not in existing]
    skipped = len(findings) - len(fresh)

    if not fresh:
      logger.info("No new comments to post (all %d duplicates)", skipped)
      return PostOutcome(skipped_duplicates=skipped, dry_run=dry_run)

    if dry_run:
      logger.info("[DRY RUN] Would post %d review comments", len(fresh))
      for finding in fresh:
        logger.info("- %s @%d: %s", finding.path, finding.position, format_comment_body(finding))
      return PostOutcome(skipped_duplicates=skipped, pending=fresh, dry_run=True)

    batches = chunk(fresh, self.batch_size)
    posted = 0
    for index, batch in enumerate(batches, start=1):
      comments = [
        {"path": f.path, "position": f.position, "body": format_comment_body(f)}
        for f in batch
      ]
      try:
        await self.client.create_review(owner, repo, number, comments)
      except GitHubError as e:
        raise SubmissionError(e, index, len(batches), posted) from e
      posted += len(batch)
      logger.debug("Posted batch %d/%d (%d comments)", index, len(batches), len(batch))

    return PostOutcome(
      posted=posted,
      skipped_duplicates=skipped,
      batches=len(batches),
      dry_run=False,
    )
