"""Language-independent rules."""

import re

from patchnote.models import Severity
from patchnote.rules.base import PatternRule, SizeRule

RULES = (
  PatternRule(
    id="GEN001",
    name="todo-marker",
    pattern=re.compile(
      r"(?:^|[ \t])(?:#|//|/\*|\*|<!--|--)[ \t]*"  # Comment prefix
      r"(?:TODO|FIXME|HACK|XXX|BUG|OPTIMIZE)"  # Keyword
      r"(?=[\s:(\[]|$)",  # Separator
      re.IGNORECASE | re.MULTILINE,
    ),
    severity=Severity.INFO,
    message=(
      "**Follow-up Marker**: Added code carries `{match}`. "
      "Address it before merging or link a tracking issue."
    ),
  ),
  SizeRule(
    id="GEN002",
    name="large-addition",
    min_additions=50,
    max_deletions=0,
    severity=Severity.INFO,
    message=(
      "**Code Size**: This is a large addition ({additions} lines) with no deletions. "
      "Consider breaking it into smaller, more focused changes."
    ),
  ),
)
