"""Core domain models for rule-driven review."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Sequence


class Severity(Enum):
  """Finding severity labels."""

  ERROR = "error"
  WARNING = "warning"
  INFO = "info"


@dataclass(frozen=True)
class RuleClause:
  """A single pattern check owned by one rule document."""

  id: str
  pattern: str
  message: str
  severity: Severity
  negative_pattern: str | None = None
  ignore_case: bool = False


@dataclass(frozen=True)
class RuleDocument:
  """A parsed rule-definition document."""

  id: str
  title: str
  severity: Severity
  category: str = "general"
  file_patterns: Sequence[str] = ("**/*",)
  body: str = ""
  rules: Sequence[RuleClause] = ()
  metadata: Mapping[str, Any] = field(default_factory=dict)
  source: Path | None = None


@dataclass(frozen=True)
class PositionedLine:
  """An added line together with its position in the file's diff."""

  text: str
  position: int


@dataclass(frozen=True)
class Finding:
  """A single reported issue anchored to a diff position.

  Findings leave the engine with ``position`` holding the 1-based index
  among added lines. ``remap_positions`` replaces it with the diff position
  before the finding is reported or posted.
  """

  path: str
  position: int
  message: str
  rule_id: str | None = None
  severity: Severity | None = None


@dataclass(frozen=True)
class FileDiff:
  """A single file's diff."""

  path: str
  content: str
  is_deleted: bool = False


@dataclass(frozen=True)
class PullRequest:
  """Pull request metadata and its changed files."""

  owner: str
  repo: str
  number: int
  title: str = ""
  state: str = "open"
  body: str = ""
  files: Sequence[FileDiff] = ()

  @property
  def slug(self) -> str:
    return f"{self.owner}/{self.repo}#{self.number}"


@dataclass(frozen=True)
class PostOutcome:
  """What the annotation poster did with a batch of findings."""

  posted: int = 0
  skipped_duplicates: int = 0
  pending: Sequence[Finding] = ()
  batches: int = 0
  dry_run: bool = True


@dataclass(frozen=True)
class ReviewReport:
  """Result of reviewing a pull request or a local diff."""

  target: str
  findings: Sequence[Finding]
  rules_loaded: int
  files_reviewed: int
  title: str = ""
  state: str = ""
  outcome: PostOutcome | None = None

  @property
  def has_errors(self) -> bool:
    """Check if any finding carries ERROR severity."""
    return any(f.severity == Severity.ERROR for f in self.findings)
