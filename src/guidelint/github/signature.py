"""Content signatures that make posted comments idempotent.

Every comment guidelint posts ends with a hidden trailer holding the
finding's signature. Later runs read the trailers back from the pull
request to learn what was already posted; nothing is stored locally.
"""

import hashlib
import re

from guidelint.models import Finding

SIGNATURE_LENGTH = 16

_TRAILER = re.compile(r"<!--\s*mcp:sig=([a-f0-9]{8,})\s*-->", re.IGNORECASE)


def compute_signature(finding: Finding) -> str:
  """Stable short hash of path, position, rule id and message."""
  base = "|".join([
    finding.path,
    str(finding.position),
    finding.rule_id or "",
    finding.message,
  ])
  return hashlib.sha256(base.encode("utf-8")).hexdigest()[:SIGNATURE_LENGTH]


def format_trailer(signature: str) -> str:
  return f"<!-- mcp:sig={signature} -->"


def format_comment_body(finding: Finding) -> str:
  """Build the comment body: message, optional rule id, signature trailer."""
  parts = [finding.message]
  if finding.rule_id:
    parts.append(f"(rule: {finding.rule_id})")
  parts.append(format_trailer(compute_signature(finding)))
  return " ".join(parts)


def extract_signature(body: str | None) -> str | None:
  """Return the signature embedded in a comment body, if any."""
  if not body:
    return None
  match = _TRAILER.search(body)
  return match.group(1).lower() if match else None
