"""Tests for local git diff extraction."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest
from patchnote.diff.extractor import (
  GitError,
  LocalChangeSource,
  _sanitize_error,
  detect_repository,
  parse_diff_output,
)
from patchnote.diff.walker import walk_diff
from patchnote.sources.base import SourceUnavailable


class TestParseDiffOutput:
  def test_empty_diff(self) -> None:
    assert parse_diff_output("") == []

  def test_whitespace_diff(self) -> None:
    assert parse_diff_output("   \n\n  ") == []

  def test_single_file_diff(self, sample_diff: str) -> None:
    result = parse_diff_output(sample_diff)
    assert len(result) == 1
    assert result[0].path == "test.py"
    assert result[0].additions == 2
    assert result[0].deletions == 1
    assert result[0].patch.startswith("@@ -1,5 +1,6 @@")

  def test_patch_is_walkable(self, sample_diff: str) -> None:
    changed = parse_diff_output(sample_diff)[0]
    assert [line.number for line in walk_diff(changed.patch)] == [1, 2, 3]

  def test_new_file_diff(self) -> None:
    diff = """diff --git a/new_file.py b/new_file.py
new file mode 100644
index 0000000..1234567
--- /dev/null
+++ b/new_file.py
@@ -0,0 +1,2 @@
+def new_func():
+    pass
"""
    result = parse_diff_output(diff)
    assert len(result) == 1
    assert result[0].path == "new_file.py"
    assert result[0].additions == 2

  def test_deleted_file_dropped(self) -> None:
    diff = """diff --git a/old_file.py b/old_file.py
deleted file mode 100644
index 1234567..0000000
--- a/old_file.py
+++ /dev/null
@@ -1,2 +0,0 @@
-def old_func():
-    pass
"""
    assert parse_diff_output(diff) == []

  def test_multiple_files_diff(self) -> None:
    diff = """diff --git a/file1.py b/file1.py
index 1234567..abcdefg 100644
--- a/file1.py
+++ b/file1.py
@@ -1 +1 @@
-old
+new
diff --git a/file2.py b/file2.py
index 1234567..abcdefg 100644
--- a/file2.py
+++ b/file2.py
@@ -1 +1 @@
-old2
+new2
"""
    result = parse_diff_output(diff)
    assert [f.path for f in result] == ["file1.py", "file2.py"]
    assert result[0].patch == "@@ -1 +1 @@\n-old\n+new"

  def test_rename_uses_new_path(self) -> None:
    diff = """diff --git a/old name.py b/new name.py
similarity index 90%
rename from old name.py
rename to new name.py
--- a/old name.py
+++ b/new name.py
@@ -1 +1 @@
-a
+b
"""
    result = parse_diff_output(diff)
    assert [f.path for f in result] == ["new name.py"]

  def test_binary_file_has_empty_patch(self) -> None:
    diff = """diff --git a/logo.png b/logo.png
index 1234567..abcdefg 100644
Binary files a/logo.png and b/logo.png differ
"""
    result = parse_diff_output(diff)
    assert result[0].path == "logo.png"
    assert result[0].patch == ""


class TestSanitizeError:
  def test_strips_paths_from_fatal(self) -> None:
    assert _sanitize_error("fatal: not a git repository: /home/me/secret/repo") == "repo"

  def test_keeps_plain_lines(self) -> None:
    assert _sanitize_error("warning: something") == "warning: something"


class TestGitError:
  def test_is_source_unavailable(self) -> None:
    assert issubclass(GitError, SourceUnavailable)


class TestDetectRepository:
  @pytest.mark.parametrize("url", [
    "git@github.com:acme/app.git",
    "https://github.com/acme/app.git",
    "https://github.com/acme/app",
    "ssh://git@github.com/acme/app/",
  ])
  def test_parses_remote(self, url: str) -> None:
    with patch("patchnote.diff.extractor.run_git", return_value=f"{url}\n"):
      assert detect_repository() == "acme/app"

  def test_non_github_remote(self) -> None:
    with patch("patchnote.diff.extractor.run_git", return_value="https://example.com/x.git\n"):
      with pytest.raises(GitError):
        detect_repository()


class TestLocalChangeSource:
  def test_change_id(self) -> None:
    assert LocalChangeSource().change_id == "working"
    assert LocalChangeSource(staged=True).change_id == "staged"
    assert LocalChangeSource(base="main").change_id == "main...HEAD"

  def test_fetch_uses_git(self, sample_diff: str) -> None:
    calls = []

    def fake_git(*args: str, cwd: Path | None = None) -> str:
      calls.append(args)
      if args[0] == "rev-parse":
        return "deadbeef\n"
      return sample_diff

    with patch("patchnote.diff.extractor.run_git", side_effect=fake_git):
      change_set = LocalChangeSource(base="main").fetch()

    assert ("diff", "main...HEAD") in calls
    assert change_set.id == "main...HEAD"
    assert change_set.head == "deadbeef"
    assert [f.path for f in change_set.files] == ["test.py"]

  def test_staged_diff(self) -> None:
    with patch("patchnote.diff.extractor.run_git", return_value="") as mock_git:
      LocalChangeSource(staged=True).fetch()
    mock_git.assert_any_call("diff", "--cached", cwd=None)

  def test_real_repository(self, tmp_path: Path) -> None:
    def git(*args: str) -> None:
      subprocess.run(["git", *args], cwd=tmp_path, capture_output=True, check=True)

    git("init")
    git("config", "user.email", "test@example.com")
    git("config", "user.name", "Test")
    (tmp_path / "notes.txt").write_text("one\ntwo\n")
    git("add", "notes.txt")
    git("commit", "-m", "init")
    (tmp_path / "notes.txt").write_text("one\nTODO two\ntwo\n")

    change_set = LocalChangeSource(cwd=tmp_path).fetch()

    assert [f.path for f in change_set.files] == ["notes.txt"]
    lines = walk_diff(change_set.files[0].patch)
    assert [(l.text, l.number) for l in lines if l.is_added] == [("TODO two", 2)]

  def test_outside_repository(self, tmp_path: Path) -> None:
    with pytest.raises(GitError):
      LocalChangeSource(cwd=tmp_path).fetch()
