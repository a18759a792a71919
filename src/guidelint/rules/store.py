"""Rule document loading and lookup."""

import logging
from pathlib import Path
from typing import Sequence

from guidelint.models import RuleClause, RuleDocument, Severity
from guidelint.rules.frontmatter import RuleParseError, parse_rule_document
from guidelint.rules.patterns import matches

logger = logging.getLogger(__name__)

RULE_SUFFIX = ".md"


def load_rule_file(path: Path) -> RuleDocument | None:
  """Read and parse one rule file, or None if it cannot be used."""
  try:
    text = path.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    logger.warning("Cannot read rule file %s: %s", path, e)
    return None

  try:
    return parse_rule_document(text, path.stem, source=path)
  except RuleParseError as e:
    logger.warning("Skipping rule file %s", e)
    return None


class RuleStore:
  """Rule documents loaded for a single review.

  A store is built per review operation and owned by its caller; nothing
  is shared between operations.

  Example:
    store = RuleStore(Path("rules"))
    store.load()
    clauses = store.rules_for_file("src/app.tsx")
  """

  def __init__(
    self,
    directory: Path | str | None = None,
    builtins: Sequence[RuleDocument] = (),
  ):
    self.directory = Path(directory) if directory is not None else None
    self._builtins = tuple(builtins)
    self._documents: list[RuleDocument] = list(self._builtins)

  @property
  def documents(self) -> list[RuleDocument]:
    return list(self._documents)

  def load(self) -> list[RuleDocument]:
    """Load every ``*.md`` document from the directory in file-name order.

    Built-in documents come first. A missing or unreadable directory yields
    only the built-ins; a malformed file is skipped on its own.
    """
    documents = list(self._builtins)
    documents.extend(self._load_directory())
    self._documents = documents
    return list(documents)

  def _load_directory(self) -> list[RuleDocument]:
    if self.directory is None:
      return []
    if not self.directory.is_dir():
      logger.warning("Rules directory not found: %s", self.directory)
      return []

    try:
      paths = sorted(
        p for p in self.directory.iterdir()
        if p.suffix == RULE_SUFFIX and p.is_file()
      )
    except OSError as e:
      logger.warning("Cannot read rules directory %s: %s", self.directory, e)
      return []

    loaded: list[RuleDocument] = []
    for path in paths:
      document = load_rule_file(path)
      if document is not None:
        loaded.append(document)
    logger.debug("Loaded %d rule documents from %s", len(loaded), self.directory)
    return loaded

  def get(self, document_id: str) -> RuleDocument | None:
    for document in self._documents:
      if document.id == document_id:
        return document
    return None

  def by_category(self, category: str) -> list[RuleDocument]:
    return [d for d in self._documents if d.category == category]

  def by_severity(self, severity: Severity) -> list[RuleDocument]:
    return [d for d in self._documents if d.severity == severity]

  def rules_for_file(self, path: str) -> list[RuleClause]:
    """Collect clauses from every document whose patterns match ``path``."""
    clauses: list[RuleClause] = []
    for document in self._documents:
      if matches(path, document.file_patterns):
        clauses.extend(document.rules)
    return clauses
