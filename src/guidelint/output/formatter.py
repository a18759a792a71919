"""Output formatting for review reports."""

import json
from abc import ABC, abstractmethod

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from guidelint.models import Finding, ReviewReport, Severity


def summarize(report: ReviewReport) -> str:
  """One-line summary with per-severity counts."""
  findings = report.findings
  if not findings:
    return f"No issues found in {report.files_reviewed} file(s)."

  counts: dict[str, int] = {}
  for finding in findings:
    label = finding.severity.value if finding.severity else "unrated"
    counts[label] = counts.get(label, 0) + 1

  parts = [f"{counts[s.value]} {s.value}" for s in Severity if s.value in counts]
  if "unrated" in counts:
    parts.append(f"{counts['unrated']} unrated")

  total = len(findings)
  return f"Found {total} issue{'s' if total != 1 else ''}: {', '.join(parts)}."


def describe_outcome(report: ReviewReport) -> str | None:
  outcome = report.outcome
  if outcome is None:
    return None
  if outcome.dry_run:
    return (
      f"Dry run: would post {len(outcome.pending)} comment(s), "
      f"{outcome.skipped_duplicates} already on the pull request."
    )
  return (
    f"Posted {outcome.posted} comment(s) in {outcome.batches} review(s), "
    f"{outcome.skipped_duplicates} already on the pull request."
  )


def _finding_dict(finding: Finding) -> dict:
  return {
    "path": finding.path,
    "position": finding.position,
    "message": finding.message,
    "ruleId": finding.rule_id,
    "severity": finding.severity.value if finding.severity else None,
  }


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, report: ReviewReport) -> str:
    """Format review report for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter."""

  SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
  }

  def __init__(self, console: Console | None = None, max_shown: int | None = None):
    self.console = console or Console()
    self.max_shown = max_shown

  def format(self, report: ReviewReport) -> str:
    self._print_summary(report)
    self._print_findings(report)
    return ""

  def _print_summary(self, report: ReviewReport) -> None:
    lines = [summarize(report)]
    if report.title:
      lines.insert(0, f"{report.title} [{report.state}]")
    lines.append(f"Rules loaded: {report.rules_loaded}")
    outcome = describe_outcome(report)
    if outcome:
      lines.append(outcome)

    self.console.print()
    self.console.print(Panel(
      Text("\n".join(lines)),
      title=f"[bold]Rule Review[/bold] ({report.target})",
      border_style="blue",
    ))

  def _print_findings(self, report: ReviewReport) -> None:
    if not report.findings:
      return

    shown = report.findings[:self.max_shown] if self.max_shown else report.findings

    table = Table(show_header=True, header_style="bold")
    table.add_column("Severity", width=10)
    table.add_column("File", width=30)
    table.add_column("Pos", width=6, justify="right")
    table.add_column("Rule", width=22)
    table.add_column("Issue", min_width=40)

    for finding in shown:
      if finding.severity:
        style = self.SEVERITY_STYLES.get(finding.severity, "")
        severity_text = Text(finding.severity.value.upper(), style=style)
      else:
        severity_text = Text("-")
      table.add_row(
        severity_text,
        Text(finding.path),
        str(finding.position),
        Text(finding.rule_id or "-"),
        Text(finding.message),
      )

    self.console.print()
    self.console.print(table)
    hidden = len(report.findings) - len(shown)
    if hidden > 0:
      self.console.print(f"[dim]... and {hidden} more[/dim]")


class JsonFormatter(OutputFormatter):
  """JSON output formatter."""

  def format(self, report: ReviewReport) -> str:
    data: dict = {
      "target": report.target,
      "summary": summarize(report),
      "rulesLoaded": report.rules_loaded,
      "filesReviewed": report.files_reviewed,
      "findings": [_finding_dict(f) for f in report.findings],
    }
    if report.outcome is not None:
      data["post"] = {
        "dryRun": report.outcome.dry_run,
        "posted": report.outcome.posted,
        "skippedDuplicates": report.outcome.skipped_duplicates,
        "pending": [_finding_dict(f) for f in report.outcome.pending],
        "batches": report.outcome.batches,
      }
    return json.dumps(data, indent=2)


class MarkdownFormatter(OutputFormatter):
  """Markdown output formatter."""

  def format(self, report: ReviewReport) -> str:
    lines = [
      "# Rule Review",
      "",
      f"**Target:** {report.target}",
      "",
      "## Summary",
      "",
      summarize(report),
      "",
    ]
    outcome = describe_outcome(report)
    if outcome:
      lines.extend([outcome, ""])

    if report.findings:
      lines.extend(["## Findings", ""])
      for index, finding in enumerate(report.findings, start=1):
        rule = f" ({finding.rule_id})" if finding.rule_id else ""
        lines.append(f"{index}. `{finding.path}` @{finding.position}: {finding.message}{rule}")
      lines.append("")

    return "\n".join(lines)


class GitHubFormatter(OutputFormatter):
  """GitHub Actions workflow command formatter.

  Positions are diff positions, so they are reported in the message rather
  than as a file line.
  """

  LEVELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "notice",
  }

  def format(self, report: ReviewReport) -> str:
    lines = []
    for finding in report.findings:
      level = self.LEVELS.get(finding.severity, "notice") if finding.severity else "notice"
      message = f"{finding.message} (diff position {finding.position})"
      message = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
      title = f",title={finding.rule_id}" if finding.rule_id else ""
      lines.append(f"::{level} file={finding.path}{title}::{message}")
    return "\n".join(lines)


def get_formatter(format_type: str, max_shown: int | None = None) -> OutputFormatter:
  """Get formatter by type name."""
  if format_type == "terminal":
    return TerminalFormatter(max_shown=max_shown)
  formatters = {
    "json": JsonFormatter,
    "markdown": MarkdownFormatter,
    "github": GitHubFormatter,
  }
  formatter_class = formatters.get(format_type)
  if not formatter_class:
    raise ValueError(f"Unknown format: {format_type}")
  return formatter_class()
