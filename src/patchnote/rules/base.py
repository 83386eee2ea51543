"""Rule abstractions for diff review."""

import re
from dataclasses import dataclass, field
from fnmatch import fnmatch
from pathlib import PurePosixPath
from typing import Any, Mapping, Protocol, Sequence

from patchnote.diff.walker import added_lines
from patchnote.models import DiffLine, Severity

Subpattern = str | re.Pattern[str]


@dataclass(frozen=True)
class RuleInput:
  """Everything a rule may look at for one file.

  Rules see the walked lines of the new revision: added lines are the
  material being reviewed, context lines are available for negative
  conditions ("no nearby line does X").
  """

  path: str
  lines: Sequence[DiffLine]
  additions: int = 0
  deletions: int = 0

  @property
  def added(self) -> list[DiffLine]:
    return added_lines(self.lines)

  @property
  def added_text(self) -> str:
    return "\n".join(line.text for line in self.added)

  @property
  def all_text(self) -> str:
    return "\n".join(line.text for line in self.lines)


@dataclass(frozen=True)
class RuleHit:
  """A positive rule evaluation for one file.

  ``subpattern`` locates the anchor line: a literal string is looked up
  with ``in``, a compiled pattern with ``search``. ``None`` marks a
  file-level hit.
  """

  subpattern: Subpattern | None = None
  values: Mapping[str, Any] = field(default_factory=dict)


class Rule(Protocol):
  """Protocol for catalog rules.

  Rules are stateless: the same input always yields the same hit, and no
  rule may depend on another rule's outcome.
  """

  @property
  def id(self) -> str:
    """Unique identifier for this rule (e.g., 'SWF001')."""
    ...

  @property
  def name(self) -> str:
    """Human-readable rule name (e.g., 'force-unwrap')."""
    ...

  @property
  def severity(self) -> Severity:
    ...

  def applies_to(self, path: str) -> bool:
    """Whether the rule inspects files at this path."""
    ...

  def match(self, target: RuleInput) -> RuleHit | None:
    """Evaluate the rule against one file's walked lines."""
    ...

  def template(self, hit: RuleHit) -> str:
    """Render the comment text for a hit."""
    ...


def compile_pattern(expr: str) -> re.Pattern[str]:
  """Compile a rule expression. ``^`` and ``$`` match per line."""
  return re.compile(expr, re.MULTILINE)


def path_matches(path: str, globs: Sequence[str]) -> bool:
  """Match a path against globs, by full path or by file name."""
  name = PurePosixPath(path).name
  return any(fnmatch(path, g) or fnmatch(name, g) for g in globs)


@dataclass(frozen=True)
class PatternRule:
  """A regular-expression rule evaluated over a file's added text.

  The rule fires when ``pattern`` matches the added text (or always, when
  ``pattern`` is None), ``requires`` also matches it, and ``absent``
  matches none of the walked lines. The finding is anchored on the first
  added line matching ``anchor``, or ``pattern`` when no anchor is given.

  ``message`` may reference ``{match}``, ``{path}``, ``{additions}`` and
  ``{deletions}``.
  """

  id: str
  name: str
  message: str
  pattern: re.Pattern[str] | None = None
  anchor: re.Pattern[str] | None = None
  requires: re.Pattern[str] | None = None
  absent: re.Pattern[str] | None = None
  paths: tuple[str, ...] = ("*",)
  severity: Severity = Severity.INFO

  def applies_to(self, path: str) -> bool:
    return path_matches(path, self.paths)

  def match(self, target: RuleInput) -> RuleHit | None:
    if not target.added:
      return None
    added_text = target.added_text

    matched: str | None = None
    if self.pattern is not None:
      found = self.pattern.search(added_text)
      if found is None:
        return None
      matched = found.group(0)

    if self.requires is not None and not self.requires.search(added_text):
      return None
    if self.absent is not None and self.absent.search(target.all_text):
      return None

    return RuleHit(
      subpattern=self.anchor if self.anchor is not None else self.pattern,
      values={
        "match": (matched or "").strip(),
        "path": target.path,
        "additions": target.additions,
        "deletions": target.deletions,
      },
    )

  def template(self, hit: RuleHit) -> str:
    return self.message.format_map(hit.values)


@dataclass(frozen=True)
class SizeRule:
  """A file-level rule on the size of a change."""

  id: str
  name: str
  message: str
  min_additions: int
  max_deletions: int | None = None
  paths: tuple[str, ...] = ("*",)
  severity: Severity = Severity.INFO

  def applies_to(self, path: str) -> bool:
    return path_matches(path, self.paths)

  def match(self, target: RuleInput) -> RuleHit | None:
    if target.additions <= self.min_additions:
      return None
    if self.max_deletions is not None and target.deletions > self.max_deletions:
      return None
    return RuleHit(
      subpattern=None,
      values={
        "path": target.path,
        "additions": target.additions,
        "deletions": target.deletions,
      },
    )

  def template(self, hit: RuleHit) -> str:
    return self.message.format_map(hit.values)
