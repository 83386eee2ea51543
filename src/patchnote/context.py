"""Read-only source context shown next to a finding."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class ContextLine:
  number: int
  text: str
  is_target: bool = False


class ContextProvider(Protocol):
  def context_lines(self, path: str, line: int, radius: int) -> list[ContextLine]:
    """Lines around ``line`` (1-based), or an empty list if unavailable."""
    ...


class LocalFileContext:
  """Reads context from files in the local working tree."""

  def __init__(self, root: Path | None = None):
    self._root = root or Path.cwd()

  def context_lines(self, path: str, line: int, radius: int) -> list[ContextLine]:
    file_path = self._root / path
    if not file_path.is_file():
      return []
    try:
      text = file_path.read_text()
    except (OSError, UnicodeDecodeError):
      return []

    lines = text.split("\n")
    start = max(1, line - radius)
    end = min(len(lines), line + radius)
    return [
      ContextLine(number=n, text=lines[n - 1], is_target=n == line)
      for n in range(start, end + 1)
    ]
