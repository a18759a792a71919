"""GitHub pull request access and comment posting."""

from guidelint.github.client import GitHubClient, GitHubError
from guidelint.github.poster import AnnotationPoster, MissingTokenError, SubmissionError
from guidelint.github.signature import compute_signature, extract_signature, format_comment_body

__all__ = [
  "AnnotationPoster",
  "GitHubClient",
  "GitHubError",
  "MissingTokenError",
  "SubmissionError",
  "compute_signature",
  "extract_signature",
  "format_comment_body",
]
