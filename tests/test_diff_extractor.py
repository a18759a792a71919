"""Tests for the local git diff source."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from guidelint.diff.extractor import (
  GitError,
  extract_branch_diff,
  extract_staged_diff,
  parse_diff_output,
  run_git,
)
from guidelint.diff.positions import map_added_lines

STAGED = """diff --git a/src/list.ts b/src/list.ts
index 3f1c2aa..9b0e4d1 100644
--- a/src/list.ts
+++ b/src/list.ts
@@ -3,4 +3,5 @@ export function List() {
   const items = load();
-  return items;
+  // TODO paginate
+  return items.slice(0, 50);
 }
diff --git a/src/new.ts b/src/new.ts
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/src/new.ts
@@ -0,0 +1,2 @@
+export const a = 1;
+export const b = 2;
diff --git a/src/legacy.ts b/src/legacy.ts
deleted file mode 100644
index 5d1e2c3..0000000
--- a/src/legacy.ts
+++ /dev/null
@@ -1 +0,0 @@
--- a negative number comment
"""


class TestParseDiffOutput:
  def test_no_output(self) -> None:
    assert parse_diff_output("") == []
    assert parse_diff_output("\n") == []

  def test_paths_and_deletions(self) -> None:
    files = parse_diff_output(STAGED)

    assert [(f.path, f.is_deleted) for f in files] == [
      ("src/list.ts", False),
      ("src/new.ts", False),
      ("src/legacy.ts", True),
    ]

  def test_content_starts_at_first_hunk(self) -> None:
    files = parse_diff_output(STAGED)

    assert all(f.content.startswith("@@") for f in files)
    assert "--- a/src/list.ts" not in files[0].content
    assert files[2].content.endswith("--- a negative number comment\n")

  def test_positions_match_pull_request_patch(self) -> None:
    local = parse_diff_output(STAGED)[0].content
    api_patch = (
      "@@ -3,4 +3,5 @@ export function List() {\n"
      "   const items = load();\n"
      "-  return items;\n"
      "+  // TODO paginate\n"
      "+  return items.slice(0, 50);\n"
      " }"
    )

    assert map_added_lines(local) == map_added_lines(api_patch)
    assert [line.position for line in map_added_lines(local)] == [3, 4]

  def test_rename_without_changes(self) -> None:
    diff = (
      "diff --git a/old/name.py b/new/name.py\n"
      "similarity index 100%\n"
      "rename from old/name.py\n"
      "rename to new/name.py\n"
    )

    [renamed] = parse_diff_output(diff)

    assert renamed.path == "new/name.py"
    assert renamed.content == ""

  def test_binary_file(self) -> None:
    diff = (
      "diff --git a/logo.png b/logo.png\n"
      "index 1111111..2222222 100644\n"
      "Binary files a/logo.png and b/logo.png differ\n"
    )

    [binary] = parse_diff_output(diff)

    assert binary.path == "logo.png"
    assert map_added_lines(binary.content) == []


class TestRunGit:
  def test_reports_last_stderr_line(self) -> None:
    failed = subprocess.CompletedProcess(
      args=["git"], returncode=128, stdout="",
      stderr="warning: /home/dev/repo/.git is odd\nfatal: not a git repository\n",
    )
    with patch("guidelint.diff.extractor.subprocess.run", return_value=failed):
      with pytest.raises(GitError, match="git diff failed: fatal: not a git repository"):
        run_git("diff", "--cached")

  def test_missing_executable(self) -> None:
    with patch("guidelint.diff.extractor.subprocess.run", side_effect=FileNotFoundError):
      with pytest.raises(GitError, match="git executable not found"):
        run_git("diff")

  def test_real_failure(self, tmp_path: Path) -> None:
    with pytest.raises(GitError):
      run_git("this-is-not-a-git-command", cwd=tmp_path)


class TestExtract:
  @patch("guidelint.diff.extractor.run_git")
  def test_staged(self, mock_git: patch) -> None:
    mock_git.return_value = STAGED

    files = extract_staged_diff()

    assert mock_git.call_args.args[:2] == ("diff", "--cached")
    assert len(files) == 3

  @patch("guidelint.diff.extractor.run_git")
  def test_branch_uses_merge_base_range(self, mock_git: patch) -> None:
    mock_git.return_value = STAGED

    extract_branch_diff("feature", "develop")

    assert mock_git.call_args.args[-1] == "develop...feature"
    assert mock_git.call_args.kwargs == {"cwd": None}
