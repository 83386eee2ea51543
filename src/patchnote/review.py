"""Core review orchestration."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from patchnote.config import DecisionMode, Settings, catalog_from_settings, load_config
from patchnote.context import LocalFileContext
from patchnote.diff import LocalChangeSource, MalformedDiff, detect_repository
from patchnote.models import ChangeSet, DispositionKind, ReviewSummary
from patchnote.publisher import CommentPublisher
from patchnote.queue import FindingQueue
from patchnote.rules import RuleEngine
from patchnote.sources.base import ChangeSource, CommentSink
from patchnote.sources.github import GitHubClient
from patchnote.workflow import ApprovalWorkflow, Decider, InteractiveDecider, PolicyDecider

logger = logging.getLogger(__name__)

_console = Console(stderr=True)


@dataclass
class Analysis:
  """Findings collected from one change set."""

  change_set: ChangeSet
  queue: FindingQueue = field(default_factory=FindingQueue)
  files_analyzed: int = 0
  skipped_files: list[str] = field(default_factory=list)
  rule_errors: int = 0

  def summary(self) -> ReviewSummary:
    return ReviewSummary(
      files_analyzed=self.files_analyzed,
      files_skipped=len(self.skipped_files),
      rule_errors=self.rule_errors,
      queued=len(self.queue),
    )


def analyze_change_set(change_set: ChangeSet, engine: RuleEngine) -> Analysis:
  """Walk and analyze every file, isolating failures per file.

  Files without a patch are ignored. Files whose patch cannot be walked
  are skipped entirely and reported.
  """
  analysis = Analysis(change_set=change_set)

  for changed in change_set.files:
    if not changed.patch.strip():
      logger.info("Skipping %s (no diff available)", changed.path)
      continue

    try:
      result = engine.analyze_file(changed)
    except MalformedDiff as e:
      logger.warning("Skipping %s: %s", changed.path, e)
      analysis.skipped_files.append(changed.path)
      continue

    logger.debug("Analyzed %s: %d finding(s)", changed.path, len(result.findings))
    analysis.files_analyzed += 1
    analysis.rule_errors += len(result.errors)
    analysis.queue.extend(result.findings)

  return analysis


class ReviewOrchestrator:
  """Runs change source -> walker -> engine -> queue -> workflow -> publisher."""

  def __init__(
    self,
    source: ChangeSource,
    sink: CommentSink,
    engine: RuleEngine,
    decider: Decider,
  ):
    self._source = source
    self._sink = sink
    self._engine = engine
    self._decider = decider

  def analyze(self, change_id: str) -> Analysis:
    """Fetch and analyze a change set.

    Raises:
      SourceError: If the change set cannot be fetched.
    """
    return analyze_change_set(self._source.fetch(change_id), self._engine)

  def approve(self, analysis: Analysis) -> ReviewSummary:
    """Present the queued findings and post the approved ones.

    The head revision is resolved when posting starts, not when the change
    set was fetched.
    """
    summary = analysis.summary()
    if not analysis.queue:
      return summary

    session = CommentPublisher(self._source, self._sink).open(analysis.change_set.id)
    outcome = ApprovalWorkflow(self._decider).run(analysis.queue, session)
    outcome.files_analyzed = summary.files_analyzed
    outcome.files_skipped = summary.files_skipped
    outcome.rule_errors = summary.rule_errors
    return outcome

  def review(self, change_id: str) -> tuple[Analysis, ReviewSummary]:
    """Analyze a change set, then approve and post its findings."""
    analysis = self.analyze(change_id)
    return analysis, self.approve(analysis)


def build_decider(settings: Settings, console: Console | None = None) -> Decider:
  """Create the disposition supplier selected in settings."""
  if settings.decision == DecisionMode.APPROVE:
    return PolicyDecider()
  if settings.decision == DecisionMode.POLICY:
    return PolicyDecider(
      approve_rules=settings.approve_rules,
      skip_rules=settings.skip_rules,
      default=DispositionKind.SKIP if settings.approve_rules else DispositionKind.APPROVE,
    )
  return InteractiveDecider(
    console=console,
    context=LocalFileContext(),
    radius=settings.context_radius,
  )


def run_review(
  number: str,
  repo: str | None = None,
  decision: DecisionMode | None = None,
  config_path: Path | None = None,
  console: Console | None = None,
) -> tuple[Analysis, ReviewSummary]:
  """Review a GitHub pull request with the given options."""
  settings = load_config(config_path).model_copy(deep=True)
  if repo:
    settings.repo = repo
  if decision:
    settings.decision = decision

  repository = settings.repo or detect_repository()
  engine = RuleEngine(catalog_from_settings(settings))

  with GitHubClient.from_env(
    repository,
    token_env=settings.token_env,
    api_url=settings.api_url,
    timeout=settings.timeout,
    max_retries=settings.max_retries,
  ) as client:
    orchestrator = ReviewOrchestrator(
      source=client,
      sink=client.comment_sink(number),
      engine=engine,
      decider=build_decider(settings, console),
    )
    with _console.status(f"Analyzing PR #{number} in {repository}..."):
      analysis = orchestrator.analyze(number)
    return analysis, orchestrator.approve(analysis)


def run_scan(
  base: str | None = None,
  staged: bool = False,
  config_path: Path | None = None,
) -> Analysis:
  """Analyze local changes without posting anything."""
  settings = load_config(config_path)
  source = LocalChangeSource(base=base, staged=staged)
  engine = RuleEngine(catalog_from_settings(settings))
  return analyze_change_set(source.fetch(), engine)
