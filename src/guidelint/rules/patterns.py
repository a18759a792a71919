"""Glob-style file pattern matching for rule applicability."""

import re
from functools import lru_cache
from typing import Iterable

MATCH_ALL = "**/*"

# Wildcard tokens, longest first so "**/" wins over "**" and "*"
_TOKENS = re.compile(r"\*\*/|\*\*|\*")


@lru_cache(maxsize=512)
def compile_pattern(pattern: str) -> re.Pattern[str]:
  """Compile a glob pattern to a regex anchored on the whole path.

  ``**/`` matches zero or more leading directories, ``**`` matches any
  run of characters including ``/``, and ``*`` matches any run of
  characters except ``/``. Every other character is literal.
  """
  parts: list[str] = []
  last = 0
  for token in _TOKENS.finditer(pattern):
    parts.append(re.escape(pattern[last:token.start()]))
    wildcard = token.group(0)
    if wildcard == "**/":
      parts.append("(?:.*/)?")
    elif wildcard == "**":
      parts.append(".*")
    else:
      parts.append("[^/]*")
    last = token.end()
  parts.append(re.escape(pattern[last:]))
  return re.compile("".join(parts))


def matches(path: str, patterns: Iterable[str]) -> bool:
  """Return True if any pattern matches the full path."""
  for pattern in patterns:
    if pattern == MATCH_ALL:
      return True
    if compile_pattern(pattern).fullmatch(path):
      return True
  return False
