"""Rule document parsing.

A rule document is Markdown with a metadata block fenced by ``---`` lines::

  ---
  title: React performance
  severity: warning
  filePatterns: ["**/*.ts", "**/*.tsx"]
  rules:
    - id: memo-derived-arrays
      pattern: "const\\s+filtered\\w*\\s*=\\s*\\w+\\.filter\\("
      negativePattern: "useMemo\\s*\\("
      message: Wrap derived arrays in useMemo.
  ---
  Free text guidance for reviewers.

The metadata block is a small subset of YAML: scalars, booleans, integers,
inline ``[a, b]`` arrays, block arrays of scalars and block arrays of
``key: value`` objects. Anything richer is out of reach on purpose.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any

from guidelint.models import RuleClause, RuleDocument, Severity

logger = logging.getLogger(__name__)

DELIMITER = "---"
DEFAULT_SEVERITY = Severity.INFO
DEFAULT_CATEGORY = "general"
DEFAULT_FILE_PATTERNS = ("**/*",)

# Keys whose values are regular expressions and get doubled escapes collapsed
_PATTERN_KEYS = frozenset({"pattern", "negativePattern"})

_KEY_VALUE = re.compile(r"^([A-Za-z_][\w.-]*)\s*:(?!//)(.*)$")
_INTEGER = re.compile(r"^-?\d+$")


class RuleParseError(Exception):
  """A rule document could not be parsed."""

  def __init__(self, source: str, reason: str):
    super().__init__(f"{source}: {reason}")
    self.source = source
    self.reason = reason


class _State(Enum):
  SCANNING = "scanning"
  IN_SCALAR_ARRAY = "in-scalar-array"
  IN_OBJECT_ARRAY = "in-object-array"


def unescape_pattern(value: str) -> str:
  """Collapse doubled backslashes so regex escapes survive the markup."""
  return value.replace("\\\\", "\\")


def parse_scalar(value: str) -> Any:
  """Convert a raw scalar to str, bool or int."""
  value = value.strip()
  if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
    return value[1:-1]
  if value in ("true", "false"):
    return value == "true"
  if _INTEGER.match(value):
    return int(value)
  return value


def _parse_value(key: str, raw: str) -> Any:
  value = parse_scalar(raw)
  if key in _PATTERN_KEYS and isinstance(value, str):
    return unescape_pattern(value)
  return value


def _parse_inline_array(raw: str) -> list[Any]:
  inner = raw.strip()[1:-1].strip()
  if not inner:
    return []
  return [parse_scalar(item) for item in inner.split(",")]


class MetadataParser:
  """Line-oriented state machine for the metadata block.

  States:
    SCANNING: top-level ``key: value`` lines.
    IN_SCALAR_ARRAY: collecting ``- value`` items for the pending key.
    IN_OBJECT_ARRAY: collecting ``- key: value`` items, each followed by
      indented ``key: value`` lines that belong to the same element.

  The accumulated array is flushed into the result when a top-level line
  is reached or input ends.
  """

  def __init__(self) -> None:
    self._result: dict[str, Any] = {}
    self._state = _State.SCANNING
    self._pending_key: str | None = None
    self._items: list[Any] = []

  @property
  def state(self) -> _State:
    return self._state

  def parse(self, text: str) -> dict[str, Any]:
    for line in text.split("\n"):
      self.feed(line)
    return self.finish()

  def feed(self, line: str) -> None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
      return

    if stripped.startswith("- ") or stripped == "-":
      self._feed_item(stripped[2:].strip())
      return

    if self._state == _State.IN_OBJECT_ARRAY and line[:1].isspace():
      self._feed_object_property(stripped)
      return

    self._flush()
    self._feed_top_level(stripped)

  def finish(self) -> dict[str, Any]:
    self._flush()
    if self._pending_key is not None:
      # A key with no value and no items is an empty string, as in YAML null
      self._result.setdefault(self._pending_key, "")
      self._pending_key = None
    return self._result

  def _feed_top_level(self, stripped: str) -> None:
    if self._pending_key is not None:
      self._result.setdefault(self._pending_key, "")
      self._pending_key = None

    match = _KEY_VALUE.match(stripped)
    if not match:
      return

    key, raw = match.group(1), (match.group(2) or "").strip()
    if raw == "":
      self._pending_key = key
    elif raw.startswith("[") and raw.endswith("]"):
      self._result[key] = _parse_inline_array(raw)
    else:
      self._result[key] = _parse_value(key, raw)

  def _feed_item(self, content: str) -> None:
    if self._pending_key is None:
      # Item with no owning key
      return

    match = _KEY_VALUE.match(content)
    if self._state == _State.SCANNING:
      self._state = _State.IN_OBJECT_ARRAY if match else _State.IN_SCALAR_ARRAY
      self._items = []

    if self._state == _State.IN_OBJECT_ARRAY:
      element: dict[str, Any] = {}
      if match:
        key = match.group(1)
        element[key] = _parse_value(key, match.group(2) or "")
      self._items.append(element)
    else:
      self._items.append(parse_scalar(content))

  def _feed_object_property(self, stripped: str) -> None:
    match = _KEY_VALUE.match(stripped)
    if not match or not self._items:
      return
    key = match.group(1)
    self._items[-1][key] = _parse_value(key, match.group(2) or "")

  def _flush(self) -> None:
    if self._state == _State.SCANNING:
      return
    if self._pending_key is not None:
      self._result[self._pending_key] = self._items
    self._state = _State.SCANNING
    self._pending_key = None
    self._items = []


def parse_metadata(text: str) -> dict[str, Any]:
  """Parse a metadata block into a dict."""
  return MetadataParser().parse(text)


def split_front_matter(text: str, source: str = "<string>") -> tuple[str, str]:
  """Split a document into its metadata block and body.

  Raises:
    RuleParseError: If the document does not open with a delimiter or the
      metadata block is never closed.
  """
  lines = text.lstrip("\ufeff").split("\n")
  if not lines or lines[0].rstrip() != DELIMITER:
    raise RuleParseError(source, f"document must start with '{DELIMITER}'")

  for index in range(1, len(lines)):
    if lines[index].rstrip() == DELIMITER:
      metadata = "\n".join(lines[1:index])
      body = "\n".join(lines[index + 1:])
      return metadata, body

  raise RuleParseError(source, f"metadata block has no closing '{DELIMITER}'")


def _default_title(document_id: str) -> str:
  return re.sub(r"[-_]+", " ", document_id).strip().title()


def _parse_severity(value: Any, default: Severity, source: str) -> Severity:
  if value in (None, ""):
    return default
  try:
    return Severity(str(value).strip().lower())
  except ValueError:
    logger.warning("%s: unknown severity %r, using %s", source, value, default.value)
    return default


def _as_patterns(value: Any) -> tuple[str, ...]:
  if isinstance(value, list):
    patterns = tuple(str(p) for p in value if str(p).strip())
  elif isinstance(value, str) and value.strip():
    patterns = (value.strip(),)
  else:
    patterns = ()
  return patterns or DEFAULT_FILE_PATTERNS


def _parse_clauses(
  raw: Any,
  title: str,
  severity: Severity,
  source: str,
) -> tuple[RuleClause, ...]:
  if not isinstance(raw, list):
    return ()

  clauses: list[RuleClause] = []
  seen: set[str] = set()
  for entry in raw:
    if not isinstance(entry, dict):
      logger.warning("%s: ignoring rules entry %r, expected a mapping", source, entry)
      continue

    clause_id = str(entry.get("id", "")).strip()
    pattern = entry.get("pattern")
    if not clause_id or pattern in (None, ""):
      logger.warning("%s: rule without id or pattern skipped", source)
      continue
    if clause_id in seen:
      logger.warning("%s: duplicate rule id %r skipped", source, clause_id)
      continue
    seen.add(clause_id)

    negative = entry.get("negativePattern")
    clauses.append(RuleClause(
      id=clause_id,
      pattern=str(pattern),
      negative_pattern=str(negative) if negative not in (None, "") else None,
      message=str(entry.get("message") or title),
      severity=_parse_severity(entry.get("severity"), severity, f"{source}:{clause_id}"),
      ignore_case=entry.get("ignoreCase") is True,
    ))

  return tuple(clauses)


def parse_rule_document(
  text: str,
  document_id: str,
  source: Path | None = None,
) -> RuleDocument:
  """Parse a rule document.

  Args:
    text: Raw document text.
    document_id: Identifier for the document, usually the file stem.
    source: Path the text was read from, for diagnostics.

  Returns:
    The parsed RuleDocument.

  Raises:
    RuleParseError: If the document has no well-formed metadata block.
  """
  label = str(source) if source else document_id
  metadata_text, body = split_front_matter(text, label)
  metadata = parse_metadata(metadata_text)

  title = str(metadata.get("title") or _default_title(document_id))
  severity = _parse_severity(metadata.get("severity"), DEFAULT_SEVERITY, label)

  return RuleDocument(
    id=document_id,
    title=title,
    severity=severity,
    category=str(metadata.get("category") or DEFAULT_CATEGORY),
    file_patterns=_as_patterns(metadata.get("filePatterns")),
    body=body.strip(),
    rules=_parse_clauses(metadata.get("rules"), title, severity, label),
    metadata=metadata,
    source=source,
  )
