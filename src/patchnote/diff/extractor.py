"""Git diff extraction for local, uncommitted or branch changes."""

import re
import subprocess
from pathlib import Path

from patchnote.models import ChangedFile, ChangeSet
from patchnote.sources.base import SourceUnavailable


class GitError(SourceUnavailable):
  """Git command failed."""


# owner/name from SSH or HTTPS GitHub remotes
_GITHUB_REMOTE = re.compile(r"github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$")


def _sanitize_error(stderr: str) -> str:
  """Remove potentially sensitive path information from error messages."""
  lines = stderr.strip().split("\n")
  sanitized = []
  for line in lines:
    if "fatal:" in line or "error:" in line:
      sanitized.append(line.split("/")[-1] if "/" in line else line)
    else:
      sanitized.append(line)
  return "\n".join(sanitized)


def run_git(*args: str, cwd: Path | None = None) -> str:
  """Run a git command and return stdout."""
  try:
    result = subprocess.run(
      ["git", *args],
      capture_output=True,
      text=True,
      check=True,
      cwd=cwd,
    )
    return result.stdout
  except FileNotFoundError as e:
    raise GitError("git executable not found") from e
  except subprocess.CalledProcessError as e:
    sanitized = _sanitize_error(e.stderr)
    raise GitError(f"git {' '.join(args)} failed: {sanitized}") from e


def detect_repository(cwd: Path | None = None) -> str:
  """Return ``owner/name`` parsed from the origin remote."""
  url = run_git("remote", "get-url", "origin", cwd=cwd).strip()
  match = _GITHUB_REMOTE.search(url)
  if match is None:
    raise GitError(f"Could not parse GitHub repository from remote: {url}")
  return f"{match.group(1)}/{match.group(2)}"


def parse_diff_output(diff_output: str) -> list[ChangedFile]:
  """Split ``git diff`` output into per-file patches.

  Each file keeps only its hunk text as the patch, with add/delete counts
  taken from the hunk bodies. Deleted files are dropped since they have no
  new revision to comment on.
  """
  if not diff_output.strip():
    return []

  files: list[ChangedFile] = []
  current_file: str | None = None
  hunks: list[str] = []
  is_deleted = False
  in_hunk = False

  def flush() -> None:
    if current_file is not None and not is_deleted:
      files.append(_build_file(current_file, hunks))

  for line in diff_output.split("\n"):
    if line.startswith("diff --git"):
      flush()
      parts = line.split(" b/")
      current_file = parts[-1] if len(parts) > 1 else None
      hunks = []
      is_deleted = False
      in_hunk = False
    elif current_file is None:
      continue
    elif line.startswith("@@"):
      in_hunk = True
      hunks.append(line)
    elif in_hunk:
      hunks.append(line)
    elif line.startswith("deleted file"):
      is_deleted = True
    elif line.startswith("+++ ") and line[4:] != "/dev/null":
      # Renames report the new path here
      current_file = line[4:].removeprefix("b/")

  flush()
  return files


def _build_file(path: str, hunks: list[str]) -> ChangedFile:
  while hunks and hunks[-1] == "":
    hunks.pop()
  additions = 0
  deletions = 0
  for line in hunks:
    if line.startswith("+"):
      additions += 1
    elif line.startswith("-"):
      deletions += 1
  return ChangedFile(
    path=path,
    patch="\n".join(hunks),
    additions=additions,
    deletions=deletions,
  )


class LocalChangeSource:
  """Change source backed by the local git working copy.

  The change id is informational: it names what was diffed (``staged``,
  ``working`` or ``base...HEAD``).
  """

  def __init__(
    self,
    base: str | None = None,
    staged: bool = False,
    cwd: Path | None = None,
  ):
    self._base = base
    self._staged = staged
    self._cwd = cwd

  @property
  def change_id(self) -> str:
    if self._base:
      return f"{self._base}...HEAD"
    return "staged" if self._staged else "working"

  def fetch(self, change_id: str | None = None) -> ChangeSet:
    if self._base:
      output = run_git("diff", f"{self._base}...HEAD", cwd=self._cwd)
    elif self._staged:
      output = run_git("diff", "--cached", cwd=self._cwd)
    else:
      output = run_git("diff", cwd=self._cwd)

    return ChangeSet(
      id=change_id or self.change_id,
      head=self.head_revision(),
      files=parse_diff_output(output),
    )

  def head_revision(self, change_id: str | None = None) -> str:
    return run_git("rev-parse", "HEAD", cwd=self._cwd).strip()
