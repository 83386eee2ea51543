"""Change sources and comment sinks."""

from patchnote.sources.base import (
  ChangeSetClosed,
  ChangeSetNotFound,
  ChangeSource,
  CommentSink,
  SinkError,
  SinkRejected,
  SinkTransientError,
  SourceError,
  SourceUnavailable,
)

__all__ = [
  "ChangeSetClosed",
  "ChangeSetNotFound",
  "ChangeSource",
  "CommentSink",
  "SinkError",
  "SinkRejected",
  "SinkTransientError",
  "SourceError",
  "SourceUnavailable",
]
