"""Rule loading and evaluation."""

from guidelint.rules.builtin import BUILTIN_DOCUMENTS
from guidelint.rules.engine import RuleEngine, evaluate, remap_positions
from guidelint.rules.frontmatter import RuleParseError, parse_rule_document
from guidelint.rules.patterns import matches
from guidelint.rules.store import RuleStore

__all__ = [
  "BUILTIN_DOCUMENTS",
  "RuleEngine",
  "RuleParseError",
  "RuleStore",
  "evaluate",
  "matches",
  "parse_rule_document",
  "remap_positions",
]
