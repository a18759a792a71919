"""Tests for finding signatures and comment bodies."""

import hashlib

from guidelint.github.signature import (
  SIGNATURE_LENGTH,
  compute_signature,
  extract_signature,
  format_comment_body,
)
from guidelint.models import Finding, Severity


def _finding(**overrides: object) -> Finding:
  values: dict = {
    "path": "src/app.ts",
    "position": 4,
    "message": "Avoid TODO comments.",
    "rule_id": "no-todo",
    "severity": Severity.WARNING,
  }
  values.update(overrides)
  return Finding(**values)


class TestComputeSignature:
  def test_known_value(self) -> None:
    expected = hashlib.sha256(b"src/app.ts|4|no-todo|Avoid TODO comments.").hexdigest()[:16]

    assert compute_signature(_finding()) == expected

  def test_fixed_length_hex(self) -> None:
    signature = compute_signature(_finding())

    assert len(signature) == SIGNATURE_LENGTH
    assert all(c in "0123456789abcdef" for c in signature)

  def test_missing_rule_id_hashes_as_empty(self) -> None:
    expected = hashlib.sha256(b"src/app.ts|4||Avoid TODO comments.").hexdigest()[:16]

    assert compute_signature(_finding(rule_id=None)) == expected

  def test_severity_does_not_affect_signature(self) -> None:
    assert compute_signature(_finding()) == compute_signature(_finding(severity=Severity.ERROR))

  def test_each_field_changes_signature(self) -> None:
    base = compute_signature(_finding())

    assert compute_signature(_finding(path="src/other.ts")) != base
    assert compute_signature(_finding(position=5)) != base
    assert compute_signature(_finding(rule_id="other")) != base
    assert compute_signature(_finding(message="Different.")) != base


class TestFormatCommentBody:
  def test_includes_rule_and_trailer(self) -> None:
    finding = _finding()

    body = format_comment_body(finding)

    assert body == (
      f"Avoid TODO comments. (rule: no-todo) <!-- mcp:sig={compute_signature(finding)} -->"
    )

  def test_without_rule_id(self) -> None:
    body = format_comment_body(_finding(rule_id=None))

    assert "(rule:" not in body
    assert body.startswith("Avoid TODO comments. <!-- mcp:sig=")


class TestExtractSignature:
  def test_reads_back_formatted_body(self) -> None:
    finding = _finding()

    assert extract_signature(format_comment_body(finding)) == compute_signature(finding)

  def test_tolerates_spacing_and_case(self) -> None:
    assert extract_signature("text <!--mcp:sig=ABCDEF0123   -->") == "abcdef0123"

  def test_requires_eight_hex_chars(self) -> None:
    assert extract_signature("<!-- mcp:sig=abc123 -->") is None

  def test_no_trailer(self) -> None:
    assert extract_signature("A human comment") is None
    assert extract_signature(None) is None
    assert extract_signature("") is None
