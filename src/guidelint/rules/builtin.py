"""Built-in heuristic rules shipped with guidelint."""

from guidelint.models import RuleClause, RuleDocument, Severity

_TYPESCRIPT = ("**/*.ts", "**/*.tsx")

TODO_COMMENTS = RuleDocument(
  id="builtin-todo-comments",
  title="Avoid TODO comments",
  severity=Severity.WARNING,
  category="maintainability",
  body="Untracked TODO markers rot. Link an issue or remove the comment.",
  rules=(
    RuleClause(
      id="avoid-todo-comments",
      pattern=r"\bTODO\b",
      message=(
        "Avoid TODO comments. Create a ticket and reference it explicitly "
        "or remove the comment."
      ),
      severity=Severity.WARNING,
      ignore_case=True,
    ),
  ),
)

REACT_PERFORMANCE = RuleDocument(
  id="builtin-react-performance",
  title="React performance",
  severity=Severity.INFO,
  category="performance",
  file_patterns=_TYPESCRIPT,
  body="Derived arrays recomputed on every render should be memoized.",
  rules=(
    RuleClause(
      id="react-performance",
      pattern=r"const\s+filteredVariables\s*=\s*variables\.filter\(",
      # Any useMemo in the file's added lines silences the whole clause
      negative_pattern=r"useMemo\s*\(",
      message=(
        "Wrap derived arrays in useMemo with proper dependencies to avoid "
        "unnecessary recalculations."
      ),
      severity=Severity.INFO,
    ),
  ),
)

TYPESCRIPT_SAFETY = RuleDocument(
  id="builtin-typescript-safety",
  title="TypeScript safety",
  severity=Severity.WARNING,
  category="correctness",
  file_patterns=_TYPESCRIPT,
  body="Optional values must be guarded before calling string methods.",
  rules=(
    RuleClause(
      id="typescript-safety",
      pattern=r"^(?!.*\?\.).*label\.toLowerCase\(\)",
      message=(
        "Guard optional values when lowercasing: use label?.toLowerCase() "
        "and a safe default for searchValue."
      ),
      severity=Severity.WARNING,
    ),
  ),
)

BUILTIN_DOCUMENTS: tuple[RuleDocument, ...] = (
  TODO_COMMENTS,
  REACT_PERFORMANCE,
  TYPESCRIPT_SAFETY,
)
