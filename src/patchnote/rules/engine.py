"""Rule engine that turns walked diff lines into findings."""

import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from patchnote.diff.walker import added_lines, walk_diff
from patchnote.models import ChangedFile, DiffLine, Finding
from patchnote.rules.base import Rule, RuleHit, RuleInput, Subpattern
from patchnote.rules.registry import build_catalog

logger = logging.getLogger(__name__)


class RuleEvaluationError(Exception):
  """A rule raised while being evaluated against one file."""

  def __init__(self, rule_id: str, path: str, cause: BaseException):
    super().__init__(f"Rule {rule_id} failed on {path}: {cause}")
    self.rule_id = rule_id
    self.path = path
    self.cause = cause


@dataclass
class AnalysisResult:
  """Findings and per-rule failures for one or more files."""

  findings: list[Finding] = field(default_factory=list)
  errors: list[RuleEvaluationError] = field(default_factory=list)

  def extend(self, other: "AnalysisResult") -> None:
    self.findings.extend(other.findings)
    self.errors.extend(other.errors)


def _contains(text: str, subpattern: Subpattern) -> bool:
  if isinstance(subpattern, re.Pattern):
    return subpattern.search(text) is not None
  return subpattern in text


def locate_anchor(lines: Sequence[DiffLine], subpattern: Subpattern | None) -> int:
  """Pick the line a finding is anchored to.

  The first added line containing ``subpattern`` wins. Without such a line
  (multi-line match or file-level hit) the first added line is used, and
  line 1 when nothing was added.
  """
  added = added_lines(lines)
  if subpattern is not None:
    for line in added:
      if _contains(line.text, subpattern):
        return line.number
  if added:
    return added[0].number
  return 1


class RuleEngine:
  """Applies an ordered rule catalog to one file at a time.

  Each rule fires at most once per file. Findings come out in catalog
  order. A rule that raises is recorded and skipped without affecting the
  remaining rules.

  Example:
    engine = RuleEngine()
    result = engine.analyze("A.swift", walk_diff(patch))
  """

  def __init__(self, rules: Sequence[Rule] | None = None):
    """Initialize the rule engine.

    Args:
      rules: Ordered catalog. If None, the registered built-in catalog is
             loaded on first use.
    """
    self._rules = tuple(rules) if rules is not None else None

  @property
  def rules(self) -> tuple[Rule, ...]:
    if self._rules is None:
      self._rules = build_catalog()
    return self._rules

  def analyze(
    self,
    path: str,
    lines: Sequence[DiffLine],
    additions: int | None = None,
    deletions: int = 0,
  ) -> AnalysisResult:
    """Run every applicable rule against one file's walked lines.

    Args:
      path: File path in the new revision.
      lines: Walker output for the file.
      additions: Added line count; defaults to the added lines walked.
      deletions: Removed line count.

    Returns:
      AnalysisResult with at most one finding per rule.
    """
    walked = tuple(lines)
    if additions is None:
      additions = len(added_lines(walked))
    target = RuleInput(path=path, lines=walked, additions=additions, deletions=deletions)
    result = AnalysisResult()

    for rule in self.rules:
      try:
        if not rule.applies_to(path):
          continue
        hit = rule.match(target)
        if hit is None:
          continue
        finding = self._to_finding(rule, target, hit)
      except Exception as e:
        error = RuleEvaluationError(rule.id, path, e)
        logger.warning("%s", error)
        result.errors.append(error)
        continue

      logger.debug("%s matched %s", rule.id, finding.location)
      result.findings.append(finding)

    return result

  def analyze_file(self, changed: ChangedFile) -> AnalysisResult:
    """Walk a changed file's patch and analyze it.

    Raises:
      MalformedDiff: If the patch cannot be walked.
    """
    lines = walk_diff(changed.patch)
    if not lines:
      return AnalysisResult()
    return self.analyze(
      changed.path,
      lines,
      additions=changed.additions or None,
      deletions=changed.deletions,
    )

  def _to_finding(self, rule: Rule, target: RuleInput, hit: RuleHit) -> Finding:
    return Finding(
      file_path=target.path,
      line=locate_anchor(target.lines, hit.subpattern),
      message=rule.template(hit),
      rule_id=rule.id,
      severity=rule.severity,
    )
