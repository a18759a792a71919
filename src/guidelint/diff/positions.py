"""Diff position mapping for inline review comments.

Review comments are anchored by *position*: the line just below a file's
first ``@@`` hunk header is position 1, and every line after it (context,
addition, deletion and any later hunk header) takes the next position.
"""

from guidelint.models import PositionedLine

_HUNK_PREFIX = "@@"
_FILE_HEADER_PREFIX = "+++"


def _split_lines(patch: str) -> list[str]:
  lines = patch.split("\n")
  if lines and lines[-1] == "":
    lines.pop()
  return lines


def _is_addition(line: str) -> bool:
  return line.startswith("+") and not line.startswith(_FILE_HEADER_PREFIX)


def map_added_lines(patch: str | None) -> list[PositionedLine]:
  """Return the added lines of a file patch with their diff positions.

  Lines before the first hunk header (``diff --git``, ``index``, ``---``,
  ``+++``) do not take a position. A patch without any hunk header is
  counted from its first line.

  Args:
    patch: Unified diff text for a single file. None or empty means no
      added lines.

  Returns:
    PositionedLine entries in input order, text without the ``+`` prefix.
  """
  if not patch:
    return []

  lines = _split_lines(patch)
  in_hunks = not any(line.startswith(_HUNK_PREFIX) for line in lines)
  position = 0
  result: list[PositionedLine] = []

  for line in lines:
    if not in_hunks:
      if line.startswith(_HUNK_PREFIX):
        in_hunks = True
      continue

    position += 1
    if _is_addition(line):
      result.append(PositionedLine(text=line[1:], position=position))

  return result


def extract_added_lines(patch: str | None) -> list[str]:
  """Return only the text of added lines, in order."""
  return [line.text for line in map_added_lines(patch)]
