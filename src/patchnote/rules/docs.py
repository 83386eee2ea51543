"""Documentation rules."""

from patchnote.models import Severity
from patchnote.rules.base import PatternRule, SizeRule
from patchnote.rules.base import compile_pattern as _re

MARKDOWN = ("*.md", "*.markdown")

RULES = (
  PatternRule(
    id="DOC001",
    name="secret-reference",
    pattern=_re(r"token|password|secret"),
    paths=MARKDOWN,
    severity=Severity.HIGH,
    message=(
      "**Security Alert**: This documentation mentions {match}. "
      "Use placeholders or environment variables instead of real values."
    ),
  ),
  SizeRule(
    id="DOC002",
    name="large-documentation",
    min_additions=100,
    paths=MARKDOWN,
    severity=Severity.INFO,
    message=(
      "**Documentation Review**: This is a substantial documentation addition "
      "({additions} lines). Consider splitting it into smaller sections."
    ),
  ),
)
