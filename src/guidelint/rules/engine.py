"""Rule evaluation over the added lines of a diff."""

import logging
import re
from dataclasses import replace
from typing import Sequence

from guidelint.diff.positions import map_added_lines
from guidelint.models import FileDiff, Finding, PositionedLine, RuleClause
from guidelint.rules.store import RuleStore

logger = logging.getLogger(__name__)


def _compile_clause(
  clause: RuleClause,
) -> tuple[re.Pattern[str], re.Pattern[str] | None] | None:
  """Compile a clause's patterns, or None if either is invalid."""
  flags = re.IGNORECASE if clause.ignore_case else 0
  try:
    positive = re.compile(clause.pattern, flags)
    negative = (
      re.compile(clause.negative_pattern, flags)
      if clause.negative_pattern else None
    )
  except re.error as e:
    logger.warning("Rule %s has an invalid pattern, skipping: %s", clause.id, e)
    return None
  return positive, negative


def evaluate(
  path: str,
  added_lines: Sequence[str],
  clauses: Sequence[RuleClause],
) -> list[Finding]:
  """Match clauses against the added lines of one file.

  Findings are positioned by 1-based index among ``added_lines``; pass them
  through ``remap_positions`` before reporting.

  A clause with a negative pattern is silenced for the whole file when any
  added line matches that negative pattern, even if it is far from the
  positive match.
  """
  findings: list[Finding] = []

  for clause in clauses:
    compiled = _compile_clause(clause)
    if compiled is None:
      continue
    positive, negative = compiled

    tentative = [
      Finding(
        path=path,
        position=index,
        message=clause.message,
        rule_id=clause.id,
        severity=clause.severity,
      )
      for index, line in enumerate(added_lines, start=1)
      if positive.search(line)
    ]
    if not tentative:
      continue

    if negative is not None and any(negative.search(line) for line in added_lines):
      logger.debug("Rule %s suppressed in %s by negative pattern", clause.id, path)
      continue

    findings.extend(tentative)

  return findings


def remap_positions(
  findings: Sequence[Finding],
  positioned: Sequence[PositionedLine],
) -> list[Finding]:
  """Replace added-line indexes with diff positions.

  Findings whose index has no corresponding added line are dropped.
  """
  remapped: list[Finding] = []
  for finding in findings:
    index = finding.position - 1
    if 0 <= index < len(positioned):
      remapped.append(replace(finding, position=positioned[index].position))
    else:
      logger.debug(
        "Dropping finding for %s at added line %d: out of range",
        finding.path, finding.position,
      )
  return remapped


class RuleEngine:
  """Evaluates a rule store against file diffs.

  Example:
    store = RuleStore(Path("rules"), builtins=BUILTIN_DOCUMENTS)
    store.load()
    findings = RuleEngine(store).review_files(files)
  """

  def __init__(self, store: RuleStore):
    self.store = store

  def review_patch(self, path: str, patch: str | None) -> list[Finding]:
    """Evaluate one file patch and return findings at diff positions."""
    positioned = map_added_lines(patch)
    if not positioned:
      return []

    clauses = self.store.rules_for_file(path)
    if not clauses:
      return []

    added = [line.text for line in positioned]
    return remap_positions(evaluate(path, added, clauses), positioned)

  def review_files(self, files: Sequence[FileDiff]) -> list[Finding]:
    findings: list[Finding] = []
    for file_diff in files:
      if file_diff.is_deleted:
        continue
      findings.extend(self.review_patch(file_diff.path, file_diff.content))
    return findings
