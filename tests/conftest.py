"""Pytest fixtures."""

import pytest
from patchnote.models import ChangedFile, ChangeSet, Disposition, Finding, Severity, Side
from patchnote.rules.base import PatternRule, compile_pattern
from patchnote.sources.base import ChangeSetNotFound


class FakeSource:
  """In-memory change source. The head can be moved between calls."""

  def __init__(self, change_set: ChangeSet):
    self.change_set = change_set
    self.head = change_set.head
    self.head_calls = 0

  def fetch(self, change_id: str) -> ChangeSet:
    if change_id != self.change_set.id:
      raise ChangeSetNotFound(change_id)
    return self.change_set

  def head_revision(self, change_id: str) -> str:
    self.head_calls += 1
    return self.head


class RecordingSink:
  """Comment sink that records calls and raises queued errors in order."""

  def __init__(self, errors: list[Exception | None] | None = None):
    self.calls: list[tuple] = []
    self._errors = list(errors or [])

  def post(self, revision: str, path: str, line: int, body: str, side: Side = Side.RIGHT) -> None:
    self.calls.append((revision, path, line, body, side))
    if self._errors:
      error = self._errors.pop(0)
      if error is not None:
        raise error


class ScriptedDecider:
  """Returns dispositions from a script and records what was presented."""

  def __init__(self, dispositions: list[Disposition]):
    self._dispositions = list(dispositions)
    self.presented: list[Finding] = []

  def decide(self, finding: Finding) -> Disposition:
    self.presented.append(finding)
    return self._dispositions.pop(0)


@pytest.fixture
def sample_diff() -> str:
  return """diff --git a/test.py b/test.py
index 1234567..abcdefg 100644
--- a/test.py
+++ b/test.py
@@ -1,5 +1,6 @@
 def hello():
-    print("hello")
+    print("hello world")
+    return True
"""


@pytest.fixture
def todo_rule() -> PatternRule:
  return PatternRule(
    id="T001",
    name="todo",
    pattern=compile_pattern("TODO"),
    message="Resolve {match} before merging.",
  )


@pytest.fixture
def a_txt_change_set() -> ChangeSet:
  return ChangeSet(
    id="42",
    head="abc123",
    files=[ChangedFile(
      path="A.txt",
      patch="@@ -1,2 +1,3 @@\n line1\n+TODO line2\n line3",
      additions=1,
      deletions=0,
    )],
  )


@pytest.fixture
def fake_source(a_txt_change_set: ChangeSet) -> FakeSource:
  return FakeSource(a_txt_change_set)


@pytest.fixture
def sink() -> RecordingSink:
  return RecordingSink()


@pytest.fixture
def make_sink():
  return RecordingSink


@pytest.fixture
def make_decider():
  return ScriptedDecider


@pytest.fixture
def make_findings():
  def _make(count: int, path: str = "a.py") -> list[Finding]:
    return [
      Finding(
        file_path=path,
        line=i + 1,
        message=f"Issue {i}",
        rule_id=f"R{i:03d}",
        severity=Severity.LOW,
      )
      for i in range(count)
    ]
  return _make
