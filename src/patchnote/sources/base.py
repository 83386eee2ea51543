"""Change source and comment sink protocols."""

from typing import Protocol

from patchnote.models import ChangeSet, Side


class SourceError(Exception):
  """The change source could not supply a change set."""


class ChangeSetNotFound(SourceError):
  """The requested change set does not exist."""


class ChangeSetClosed(SourceError):
  """The change set exists but is no longer open."""


class SourceUnavailable(SourceError):
  """The change source could not be reached."""


class SinkError(Exception):
  """A comment could not be stored."""


class SinkRejected(SinkError):
  """The sink refused the comment. Retrying with the same arguments is pointless."""

  def __init__(self, reason: str):
    super().__init__(reason)
    self.reason = reason


class SinkTransientError(SinkError):
  """The sink failed transiently. The caller may retry later."""


class ChangeSource(Protocol):
  """Supplies changed files and the current head revision of a change set."""

  def fetch(self, change_id: str) -> ChangeSet:
    """Return the change set with its files and head revision.

    Raises:
      ChangeSetNotFound: Unknown change set.
      ChangeSetClosed: Change set is not open.
      SourceUnavailable: Transient failure reaching the source.
    """
    ...

  def head_revision(self, change_id: str) -> str:
    """Return the change set's current head revision."""
    ...


class CommentSink(Protocol):
  """Durably stores review comments anchored to a revision."""

  def post(
    self,
    revision: str,
    path: str,
    line: int,
    body: str,
    side: Side = Side.RIGHT,
  ) -> None:
    """Store one comment.

    Raises:
      SinkRejected: The comment was refused.
      SinkTransientError: The sink failed transiently.
    """
    ...
