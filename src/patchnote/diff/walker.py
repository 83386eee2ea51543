"""Resolve unified diff hunks to line numbers of the new revision."""

import re
from dataclasses import dataclass
from typing import Sequence

from patchnote.models import DiffLine, LineKind

# Pattern to parse diff hunk headers: @@ -start,count +start,count @@ section
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")

# File header lines that may precede the first hunk of a git patch
_FILE_HEADER_PREFIXES = (
  "diff --git",
  "index ",
  "--- ",
  "+++ ",
  "new file mode",
  "deleted file mode",
  "old mode",
  "new mode",
  "similarity index",
  "dissimilarity index",
  "rename from",
  "rename to",
  "copy from",
  "copy to",
  "Binary files",
)


class MalformedDiff(ValueError):
  """A file's diff text could not be walked."""


@dataclass(frozen=True)
class HunkHeader:
  """Parsed values of a hunk header line."""

  old_start: int
  old_count: int
  new_start: int
  new_count: int
  section: str = ""


def parse_hunk_header(line: str) -> HunkHeader:
  """Parse an ``@@ -a,b +c,d @@`` header.

  Raises:
    MalformedDiff: If the line is not a well-formed hunk header.
  """
  match = _HUNK_HEADER.match(line)
  if match is None:
    raise MalformedDiff(f"Invalid hunk header: {line!r}")

  old_start, old_count, new_start, new_count, section = match.groups()
  return HunkHeader(
    old_start=int(old_start),
    old_count=int(old_count) if old_count is not None else 1,
    new_start=int(new_start),
    new_count=int(new_count) if new_count is not None else 1,
    section=section.strip(),
  )


def walk_diff(patch: str) -> list[DiffLine]:
  """Walk one file's unified diff and number its new-revision lines.

  Added and context lines are emitted with their line number in the new
  revision. Removed lines are consumed without emitting anything and do
  not advance the cursor. Every hunk re-seeds the cursor from its own
  header, so gaps between hunks are preserved.

  Args:
    patch: Diff text for a single file. Git file headers before the first
      hunk are tolerated.

  Returns:
    Walked lines in diff order. Empty when the patch is empty (binary file
    or no patch available).

  Raises:
    MalformedDiff: If a hunk header is malformed or missing, or hunks
      overlap.
  """
  if not patch.strip():
    return []

  raw_lines = patch.split("\n")
  if raw_lines and raw_lines[-1] == "":
    raw_lines.pop()

  walked: list[DiffLine] = []
  header: HunkHeader | None = None
  cursor = 0
  remaining = 0

  for raw in raw_lines:
    if raw.startswith("@@"):
      header = parse_hunk_header(raw)
      if walked and header.new_count and header.new_start <= walked[-1].number:
        raise MalformedDiff(
          f"Hunk starting at line {header.new_start} overlaps line {walked[-1].number}"
        )
      cursor = header.new_start
      remaining = header.new_count
      continue

    if header is None:
      if raw.startswith(_FILE_HEADER_PREFIXES):
        continue
      raise MalformedDiff(f"Missing hunk header before: {raw!r}")

    if raw.startswith("+"):
      walked.append(DiffLine(LineKind.ADDED, raw[1:], cursor))
      cursor += 1
      remaining -= 1
    elif raw.startswith(" "):
      walked.append(DiffLine(LineKind.CONTEXT, raw[1:], cursor))
      cursor += 1
      remaining -= 1
    elif raw.startswith("-") or raw.startswith("\\"):
      continue
    elif raw == "":
      # Some tools strip the single space from blank context lines
      if remaining > 0:
        walked.append(DiffLine(LineKind.CONTEXT, "", cursor))
        cursor += 1
        remaining -= 1
    else:
      raise MalformedDiff(f"Unexpected line in hunk: {raw!r}")

  return walked


def added_lines(lines: Sequence[DiffLine]) -> list[DiffLine]:
  """Filter walked lines down to the added ones."""
  return [line for line in lines if line.is_added]
