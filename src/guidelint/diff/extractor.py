"""Local diff source for ``guidelint check``.

Combined ``git diff`` output is split per file and each file's header
(``diff --git``, ``index``, mode lines, ``---``/``+++``) is dropped, so
``FileDiff.content`` starts at the first ``@@`` hunk header. That is the
same shape as the ``patch`` field of the pull request files API, and the
position mapper treats both alike.
"""

import re
import subprocess
from pathlib import Path

from guidelint.models import FileDiff

_DEV_NULL = "/dev/null"
_FILE_START = re.compile(r"^diff --git ", re.MULTILINE)
_HEADER_PATH = re.compile(r"^(?:---|\+\+\+) (?:[ab]/)?(.+?)\t?$")
_RENAME_TO = re.compile(r"^rename to (.+)$")
_GIT_HEADER_PATHS = re.compile(r"^a/(.+) b/(.+)$")


class GitError(Exception):
  """Git command failed."""


def run_git(*args: str, cwd: Path | None = None) -> str:
  """Run ``git`` with the given arguments and return stdout."""
  try:
    completed = subprocess.run(
      ["git", *args],
      capture_output=True,
      text=True,
      cwd=cwd,
    )
  except FileNotFoundError as e:
    raise GitError("git executable not found") from e

  if completed.returncode != 0:
    # Last stderr line is git's own summary; earlier ones may echo local paths
    lines = [line for line in completed.stderr.splitlines() if line.strip()]
    reason = lines[-1].strip() if lines else f"exit status {completed.returncode}"
    raise GitError(f"git {args[0] if args else ''} failed: {reason}")
  return completed.stdout


def extract_staged_diff(cwd: Path | None = None) -> list[FileDiff]:
  """Per-file patches of the staged changes."""
  return parse_diff_output(run_git("diff", "--cached", "--no-color", "--no-ext-diff", cwd=cwd))


def extract_branch_diff(
  branch: str,
  base: str = "main",
  cwd: Path | None = None,
) -> list[FileDiff]:
  """Per-file patches of ``branch`` against its merge base with ``base``."""
  return parse_diff_output(
    run_git("diff", "--no-color", "--no-ext-diff", f"{base}...{branch}", cwd=cwd)
  )


def _parse_file_block(block: str) -> FileDiff | None:
  lines = block.split("\n")
  header, hunks = lines, []
  for index, line in enumerate(lines):
    if line.startswith("@@"):
      header, hunks = lines[:index], lines[index:]
      break

  old_path = new_path = None
  for line in header:
    path_match = _HEADER_PATH.match(line)
    rename_match = _RENAME_TO.match(line)
    if path_match and line.startswith("---"):
      old_path = path_match.group(1)
    elif path_match:
      new_path = path_match.group(1)
    elif rename_match:
      new_path = rename_match.group(1)

  if new_path is None and old_path is None:
    # Binary or mode-only change: take the path from the first header line
    paths = _GIT_HEADER_PATHS.match(header[0]) if header else None
    if paths is None:
      return None
    new_path = paths.group(2)

  is_deleted = new_path == _DEV_NULL
  path = old_path if is_deleted else new_path
  return FileDiff(path=path, content="\n".join(hunks), is_deleted=is_deleted)


def parse_diff_output(diff_output: str) -> list[FileDiff]:
  """Split combined ``git diff`` output into hunk-only FileDiffs."""
  files = []
  for block in _FILE_START.split(diff_output)[1:]:
    parsed = _parse_file_block(block)
    if parsed is not None:
      files.append(parsed)
  return files
