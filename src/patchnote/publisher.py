"""Posting approved findings as review comments."""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from patchnote.models import Finding, FindingOutcome, Side
from patchnote.sources.base import (
  ChangeSource,
  CommentSink,
  SinkError,
  SinkRejected,
  SinkTransientError,
)

logger = logging.getLogger(__name__)


@dataclass
class PublishTally:
  """Outcome counts for one publishing session."""

  posted: int = 0
  failed: int = 0
  retryable: int = 0
  failures: list[str] = field(default_factory=list)


class PublishSession:
  """Posts findings against one resolved head revision.

  Each finding is submitted at most once per session.
  """

  def __init__(self, change_id: str, revision: str, sink: CommentSink):
    self.change_id = change_id
    self.revision = revision
    self._sink = sink
    self.tally = PublishTally()

  def publish(self, finding: Finding) -> FindingOutcome:
    """Post one approved finding and record its outcome.

    Sink failures are counted, never raised. A finding already submitted
    in this session is not sent again.
    """
    if finding.outcome is not None:
      logger.debug("Not resubmitting %s", finding.location)
      return finding.outcome

    if not finding.is_approved:
      raise ValueError(f"Finding at {finding.location} is {finding.status.value}, not approved")

    try:
      self._sink.post(
        self.revision,
        finding.file_path,
        finding.line,
        finding.message,
        side=Side.RIGHT,
      )
    except SinkTransientError as e:
      self.tally.retryable += 1
      return self._fail(finding, f"{finding.location}: {e} (retryable)")
    except SinkRejected as e:
      return self._fail(finding, f"{finding.location}: {e.reason}")
    except SinkError as e:
      return self._fail(finding, f"{finding.location}: {e}")

    finding.record(FindingOutcome.POSTED)
    self.tally.posted += 1
    logger.debug("Posted %s at %s", finding.rule_id, finding.location)
    return FindingOutcome.POSTED

  def _fail(self, finding: Finding, reason: str) -> FindingOutcome:
    logger.warning("Could not post comment %s", reason)
    finding.record(FindingOutcome.FAILED)
    self.tally.failed += 1
    self.tally.failures.append(reason)
    return FindingOutcome.FAILED


class CommentPublisher:
  """Resolves the head revision and hands findings to the comment sink."""

  def __init__(self, source: ChangeSource, sink: CommentSink):
    self._source = source
    self._sink = sink

  def open(self, change_id: str) -> PublishSession:
    """Start a session, re-reading the change set's current head.

    Raises:
      SourceError: If the head revision cannot be resolved.
    """
    revision = self._source.head_revision(change_id)
    logger.debug("Publishing to %s at %s", change_id, revision)
    return PublishSession(change_id, revision, self._sink)

  def publish_all(self, change_id: str, findings: Iterable[Finding]) -> PublishTally:
    """Post every approved finding in one session."""
    session = self.open(change_id)
    for finding in findings:
      if finding.is_approved and finding.outcome is None:
        session.publish(finding)
    return session.tally
