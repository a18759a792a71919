"""Diff extraction and position mapping."""

from guidelint.diff.extractor import (
  GitError,
  extract_branch_diff,
  extract_staged_diff,
  parse_diff_output,
)
from guidelint.diff.positions import extract_added_lines, map_added_lines

__all__ = [
  "GitError",
  "extract_added_lines",
  "extract_branch_diff",
  "extract_staged_diff",
  "map_added_lines",
  "parse_diff_output",
]
