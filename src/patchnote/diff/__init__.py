"""Diff extraction and walking."""

from patchnote.diff.extractor import (
    GitError,
    LocalChangeSource,
    detect_repository,
    parse_diff_output,
)
from patchnote.diff.walker import MalformedDiff, added_lines, parse_hunk_header, walk_diff

__all__ = [
  "GitError",
  "LocalChangeSource",
  "MalformedDiff",
  "added_lines",
  "detect_repository",
  "parse_diff_output",
  "parse_hunk_header",
  "walk_diff",
]
