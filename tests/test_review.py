"""End-to-end tests for review orchestration."""

import pytest
from patchnote.config import DecisionMode, Settings
from patchnote.models import ChangedFile, ChangeSet, Disposition, Side
from patchnote.review import ReviewOrchestrator, analyze_change_set, build_decider
from patchnote.rules import RuleEngine
from patchnote.sources.base import ChangeSetNotFound, SinkTransientError
from patchnote.workflow import InteractiveDecider, PolicyDecider


class TestEndToEnd:
  def test_a_txt_scenario(self, fake_source, sink, todo_rule, make_decider) -> None:
    orchestrator = ReviewOrchestrator(
      source=fake_source,
      sink=sink,
      engine=RuleEngine([todo_rule]),
      decider=make_decider([Disposition.approve()]),
    )

    analysis, summary = orchestrator.review("42")

    assert [f.line for f in analysis.queue] == [2]
    assert sink.calls == [("abc123", "A.txt", 2, "Resolve TODO before merging.", Side.RIGHT)]
    assert summary.posted == 1
    assert summary.failed == 0
    assert summary.queued == 1
    assert summary.files_analyzed == 1

  def test_head_re_resolved_before_posting(self, fake_source, sink, todo_rule, make_decider) -> None:
    orchestrator = ReviewOrchestrator(
      fake_source, sink, RuleEngine([todo_rule]), make_decider([Disposition.approve()])
    )

    analysis = orchestrator.analyze("42")
    fake_source.head = "moved99"
    orchestrator.approve(analysis)

    assert sink.calls[0][0] == "moved99"

  def test_no_findings_skips_publishing(self, fake_source, sink, make_decider) -> None:
    orchestrator = ReviewOrchestrator(fake_source, sink, RuleEngine([]), make_decider([]))

    _, summary = orchestrator.review("42")

    assert summary.queued == 0
    assert fake_source.head_calls == 0
    assert sink.calls == []

  def test_transient_failure_reported_retryable(
    self, fake_source, make_sink, todo_rule, make_decider
  ) -> None:
    sink = make_sink([SinkTransientError("HTTP 503")])
    orchestrator = ReviewOrchestrator(
      fake_source, sink, RuleEngine([todo_rule]), make_decider([Disposition.approve()])
    )

    _, summary = orchestrator.review("42")

    assert summary.failed == 1
    assert summary.retryable == 1
    assert summary.posted == 0

  def test_unknown_change_set(self, fake_source, sink, todo_rule, make_decider) -> None:
    orchestrator = ReviewOrchestrator(fake_source, sink, RuleEngine([todo_rule]), make_decider([]))
    with pytest.raises(ChangeSetNotFound):
      orchestrator.review("999")


class TestAnalyzeChangeSet:
  def test_malformed_file_skipped_others_analyzed(self, todo_rule) -> None:
    change_set = ChangeSet(
      id="1",
      head="h",
      files=[
        ChangedFile(path="bad.txt", patch="+TODO without header"),
        ChangedFile(path="good.txt", patch="@@ -0,0 +1 @@\n+TODO here"),
      ],
    )

    analysis = analyze_change_set(change_set, RuleEngine([todo_rule]))

    assert analysis.skipped_files == ["bad.txt"]
    assert analysis.files_analyzed == 1
    assert [f.file_path for f in analysis.queue] == ["good.txt"]

  def test_empty_patch_is_not_an_error(self, todo_rule) -> None:
    change_set = ChangeSet(id="1", head="h", files=[ChangedFile(path="logo.png", patch="")])

    analysis = analyze_change_set(change_set, RuleEngine([todo_rule]))

    assert analysis.skipped_files == []
    assert len(analysis.queue) == 0

  def test_queue_keeps_file_order(self, todo_rule) -> None:
    change_set = ChangeSet(
      id="1",
      head="h",
      files=[
        ChangedFile(path="z.txt", patch="@@ -0,0 +1 @@\n+TODO z"),
        ChangedFile(path="a.txt", patch="@@ -0,0 +1 @@\n+TODO a"),
      ],
    )

    analysis = analyze_change_set(change_set, RuleEngine([todo_rule]))

    assert [f.file_path for f in analysis.queue] == ["z.txt", "a.txt"]

  def test_rule_errors_counted(self) -> None:
    class Broken:
      id = "X"
      name = "broken"
      severity = None

      def applies_to(self, path):
        raise RuntimeError("boom")

    change_set = ChangeSet(id="1", head="h", files=[ChangedFile("a.txt", "@@ -0,0 +1 @@\n+x")])

    analysis = analyze_change_set(change_set, RuleEngine([Broken()]))

    assert analysis.rule_errors == 1
    assert analysis.summary().rule_errors == 1


class TestBuildDecider:
  def test_interactive_by_default(self) -> None:
    assert isinstance(build_decider(Settings()), InteractiveDecider)

  def test_approve_all(self, make_findings) -> None:
    decider = build_decider(Settings(decision=DecisionMode.APPROVE, skip_rules=["R000"]))
    assert isinstance(decider, PolicyDecider)
    assert decider.decide(make_findings(1)[0]).kind.value == "approve"

  def test_policy_with_approve_list_skips_rest(self, make_findings) -> None:
    first, second = make_findings(2)
    decider = build_decider(Settings(decision=DecisionMode.POLICY, approve_rules=["R000"]))
    assert decider.decide(first).kind.value == "approve"
    assert decider.decide(second).kind.value == "skip"
