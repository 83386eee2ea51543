"""Core domain models for diff review."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence


class Severity(Enum):
  """Finding severity levels."""

  CRITICAL = "critical"
  HIGH = "high"
  MEDIUM = "medium"
  LOW = "low"
  INFO = "info"


class LineKind(Enum):
  """Kind of a walked line in the new revision."""

  ADDED = "added"
  CONTEXT = "context"


class Side(Enum):
  """Diff side a review comment is anchored to."""

  LEFT = "LEFT"
  RIGHT = "RIGHT"


class FindingStatus(Enum):
  """Approval state of a finding."""

  PROPOSED = "proposed"
  APPROVED = "approved"
  EDITED = "edited"
  SKIPPED = "skipped"
  ABORTED = "aborted"


class FindingOutcome(Enum):
  """Final result of a finding once the workflow is done with it."""

  POSTED = "posted"
  SKIPPED = "skipped"
  FAILED = "failed"


class DispositionKind(Enum):
  """Decision supplied for a single finding."""

  APPROVE = "approve"
  EDIT = "edit"
  SKIP = "skip"
  ABORT = "abort"


class InvalidTransition(ValueError):
  """A finding was moved along an edge the state machine does not allow."""


@dataclass(frozen=True)
class DiffLine:
  """One line of a file's new revision as it appears after the change."""

  kind: LineKind
  text: str
  number: int

  @property
  def is_added(self) -> bool:
    return self.kind is LineKind.ADDED


@dataclass(frozen=True)
class ChangedFile:
  """A single changed file in a change set."""

  path: str
  patch: str
  additions: int = 0
  deletions: int = 0


@dataclass(frozen=True)
class ChangeSet:
  """A change set as reported by a change source."""

  id: str
  head: str
  files: Sequence[ChangedFile]
  title: str = ""
  url: str | None = None


@dataclass(frozen=True)
class Disposition:
  """A decision for one finding, optionally carrying replacement text."""

  kind: DispositionKind
  text: str | None = None

  @classmethod
  def approve(cls) -> "Disposition":
    return cls(DispositionKind.APPROVE)

  @classmethod
  def edit(cls, text: str | None = None) -> "Disposition":
    return cls(DispositionKind.EDIT, text)

  @classmethod
  def skip(cls) -> "Disposition":
    return cls(DispositionKind.SKIP)

  @classmethod
  def abort(cls) -> "Disposition":
    return cls(DispositionKind.ABORT)


_TRANSITIONS: dict[FindingStatus, set[FindingStatus]] = {
  FindingStatus.PROPOSED: {
    FindingStatus.APPROVED,
    FindingStatus.EDITED,
    FindingStatus.SKIPPED,
    FindingStatus.ABORTED,
  },
  FindingStatus.EDITED: {FindingStatus.APPROVED},
}


@dataclass(eq=False)
class Finding:
  """A candidate review comment anchored to an added line.

  Findings compare by identity: two findings with the same text on the
  same line are still distinct queue entries.
  """

  file_path: str
  line: int
  message: str
  rule_id: str
  severity: Severity = Severity.INFO
  status: FindingStatus = FindingStatus.PROPOSED
  outcome: FindingOutcome | None = None

  @property
  def location(self) -> str:
    return f"{self.file_path}:{self.line}"

  @property
  def is_approved(self) -> bool:
    return self.status is FindingStatus.APPROVED

  def approve(self) -> None:
    self._move(FindingStatus.APPROVED)

  def edit(self, text: str | None) -> None:
    """Rewrite the message, then proceed as approved.

    Blank text keeps the original message.
    """
    self._move(FindingStatus.EDITED)
    if text and text.strip():
      self.message = text.strip()
    self._move(FindingStatus.APPROVED)

  def skip(self) -> None:
    self._move(FindingStatus.SKIPPED)
    self.outcome = FindingOutcome.SKIPPED

  def abort(self) -> None:
    self._move(FindingStatus.ABORTED)

  def record(self, outcome: FindingOutcome) -> None:
    """Record the posting outcome of an approved finding."""
    if self.status is not FindingStatus.APPROVED:
      raise InvalidTransition(
        f"Cannot record {outcome.value} for {self.status.value} finding at {self.location}"
      )
    if self.outcome is not None:
      raise InvalidTransition(f"Finding at {self.location} already {self.outcome.value}")
    self.outcome = outcome

  def _move(self, target: FindingStatus) -> None:
    allowed = _TRANSITIONS.get(self.status, set())
    if target not in allowed:
      raise InvalidTransition(
        f"Cannot move finding at {self.location} from {self.status.value} to {target.value}"
      )
    self.status = target


@dataclass
class ReviewSummary:
  """Counts reported at the end of a review session."""

  files_analyzed: int = 0
  files_skipped: int = 0
  rule_errors: int = 0
  queued: int = 0
  approved: int = 0
  edited: int = 0
  skipped: int = 0
  posted: int = 0
  failed: int = 0
  retryable: int = 0
  aborted: bool = False
  failures: list[str] = field(default_factory=list)

  @property
  def presented(self) -> int:
    return self.approved + self.skipped + (1 if self.aborted else 0)
