"""CLI interface using Typer."""

import asyncio
import os
import traceback
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from guidelint import __version__
from guidelint.config import Settings
from guidelint.diff import GitError
from guidelint.github import GitHubError, MissingTokenError
from guidelint.log import configure_logging
from guidelint.models import ReviewReport
from guidelint.output import get_formatter
from guidelint.review import (
  InvalidPullRequestUrl,
  build_store,
  resolve_settings,
  review_pull_request,
  run_check,
)

app = typer.Typer(
  name="guidelint",
  help="Review pull requests against textual coding rules",
  no_args_is_help=True,
)

console = Console()

_KNOWN_ERRORS = (
  GitError,
  GitHubError,
  InvalidPullRequestUrl,
  MissingTokenError,
  FileNotFoundError,
  ValueError,
)


def _is_debug() -> bool:
  return os.environ.get("GUIDELINT_DEBUG", "").lower() in ("1", "true", "yes")


def version_callback(value: bool) -> None:
  if value:
    console.print(f"guidelint {__version__}")
    raise typer.Exit()


@app.callback()
def main(
  version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
  """Review pull requests against textual coding rules."""


def _fail(error: Exception, debug: bool) -> None:
  console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
  if debug and not isinstance(error, _KNOWN_ERRORS):
    console.print("\n[dim]Traceback:[/dim]")
    console.print(traceback.format_exc())
  raise typer.Exit(1) from None


def _emit(report: ReviewReport, format_type: str, settings: Settings) -> None:
  formatter = get_formatter(format_type, max_shown=settings.max_findings_shown)
  output = formatter.format(report)
  if output:
    console.print(output, markup=False, highlight=False)


@app.command()
def review(
  pull_request: str = typer.Argument(
    ..., help="Pull request URL (https://github.com/owner/repo/pull/123) or owner/repo#123"
  ),
  live: bool = typer.Option(False, "--live/--dry-run", help="Post comments (default: dry run)"),
  rules_dir: Path = typer.Option(None, "--rules-dir", "-r", help="Directory of rule documents"),
  no_builtin: bool = typer.Option(False, "--no-builtin", help="Disable built-in heuristics"),
  format_type: str = typer.Option(
    "terminal", "--format", help="Output format: terminal, json, markdown, github"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Verbose logs and tracebacks"),
) -> None:
  """Review a pull request and post new findings as inline comments."""
  show_traceback = debug or _is_debug()
  configure_logging("DEBUG" if show_traceback else None)

  try:
    settings = resolve_settings(
      config_path=config,
      rules_dir=rules_dir,
      builtin_rules=False if no_builtin else None,
      dry_run=not live,
    )
    report = asyncio.run(review_pull_request(pull_request, settings))
    _emit(report, format_type, settings)
  except Exception as e:
    _fail(e, show_traceback)


@app.command()
def check(
  branch: str = typer.Option(None, "--branch", "-b", help="Branch to review against base"),
  base: str = typer.Option("main", "--base", help="Base branch for comparison"),
  rules_dir: Path = typer.Option(None, "--rules-dir", "-r", help="Directory of rule documents"),
  no_builtin: bool = typer.Option(False, "--no-builtin", help="Disable built-in heuristics"),
  format_type: str = typer.Option(
    "terminal", "--format", help="Output format: terminal, json, markdown, github"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  exit_code: bool = typer.Option(
    False, "--exit-code", help="Exit 1 when any error-severity finding is reported"
  ),
  debug: bool = typer.Option(False, "--debug", "-d", help="Verbose logs and tracebacks"),
) -> None:
  """Review local staged changes (or a branch diff) without posting."""
  show_traceback = debug or _is_debug()
  configure_logging("DEBUG" if show_traceback else None)

  try:
    settings = resolve_settings(
      config_path=config,
      rules_dir=rules_dir,
      builtin_rules=False if no_builtin else None,
    )
    report = run_check(settings, branch=branch, base=base)
    _emit(report, format_type, settings)
  except Exception as e:
    _fail(e, show_traceback)

  if exit_code and report.has_errors:
    raise typer.Exit(1)


@app.command()
def rules(
  rules_dir: Path = typer.Option(None, "--rules-dir", "-r", help="Directory of rule documents"),
  no_builtin: bool = typer.Option(False, "--no-builtin", help="Disable built-in heuristics"),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
  """List loaded rule documents."""
  configure_logging()

  try:
    settings = resolve_settings(
      config_path=config,
      rules_dir=rules_dir,
      builtin_rules=False if no_builtin else None,
    )
    store = build_store(settings)
  except Exception as e:
    _fail(e, _is_debug())

  documents = store.documents
  console.print(f"Loaded rule documents: {len(documents)}")
  for index, document in enumerate(documents, start=1):
    console.print(
      f"{index}. {document.title} ({document.severity.value})",
      markup=False, highlight=False,
    )
    console.print(f"   Category: {document.category}", markup=False, highlight=False)
    console.print(
      f"   Patterns: {', '.join(document.file_patterns)}", markup=False, highlight=False
    )
    if document.rules:
      console.print(
        f"   Rules: {', '.join(c.id for c in document.rules)}", markup=False, highlight=False
      )


if __name__ == "__main__":
  app()
