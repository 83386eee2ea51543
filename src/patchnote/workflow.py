"""Approval workflow: one decision per finding, in queue order."""

import logging
from typing import Iterable, Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.text import Text

from patchnote.context import ContextProvider
from patchnote.models import Disposition, DispositionKind, Finding, ReviewSummary
from patchnote.publisher import PublishSession
from patchnote.queue import FindingQueue

logger = logging.getLogger(__name__)


class Decider(Protocol):
  """Supplies a disposition for each presented finding."""

  def decide(self, finding: Finding) -> Disposition:
    ...


@runtime_checkable
class TextReviser(Protocol):
  """Supplies replacement text for an edit without inline text."""

  def revise_text(self, finding: Finding) -> str | None:
    ...


class ApprovalWorkflow:
  """Presents queued findings one at a time and posts the approved ones.

  Approved and edited findings go to the publishing session immediately.
  A failed post is counted and the workflow moves on. An abort stops the
  run: nothing after it is presented and nothing already posted is undone.
  """

  def __init__(self, decider: Decider):
    self._decider = decider

  def run(self, queue: FindingQueue, session: PublishSession) -> ReviewSummary:
    summary = ReviewSummary(queued=len(queue))

    for finding in queue:
      disposition = self._decider.decide(finding)

      if disposition.kind is DispositionKind.ABORT:
        finding.abort()
        summary.aborted = True
        logger.info("Review aborted at %s", finding.location)
        break

      if disposition.kind is DispositionKind.SKIP:
        finding.skip()
        summary.skipped += 1
        continue

      if disposition.kind is DispositionKind.EDIT:
        finding.edit(self._revised_text(finding, disposition))
        summary.edited += 1
      elif disposition.kind is DispositionKind.APPROVE:
        finding.approve()
      else:
        raise ValueError(f"Unknown disposition: {disposition.kind}")

      summary.approved += 1
      session.publish(finding)

    summary.posted = session.tally.posted
    summary.failed = session.tally.failed
    summary.retryable = session.tally.retryable
    summary.failures = list(session.tally.failures)
    return summary

  def _revised_text(self, finding: Finding, disposition: Disposition) -> str | None:
    if disposition.text is not None:
      return disposition.text
    if isinstance(self._decider, TextReviser):
      return self._decider.revise_text(finding)
    return None


class PolicyDecider:
  """Decides by rule id without asking anyone.

  Rules in ``skip_rules`` are skipped, rules in ``approve_rules`` are
  approved, and everything else gets ``default``.
  """

  def __init__(
    self,
    approve_rules: Iterable[str] = (),
    skip_rules: Iterable[str] = (),
    default: DispositionKind = DispositionKind.APPROVE,
  ):
    if default not in (DispositionKind.APPROVE, DispositionKind.SKIP):
      raise ValueError(f"Policy default must be approve or skip, not {default.value}")
    self._approve = set(approve_rules)
    self._skip = set(skip_rules)
    self._default = default

  def decide(self, finding: Finding) -> Disposition:
    if finding.rule_id in self._skip:
      return Disposition.skip()
    if finding.rule_id in self._approve:
      return Disposition.approve()
    return Disposition(self._default)


_CHOICES = {
  "a": Disposition.approve(),
  "e": Disposition.edit(),
  "s": Disposition.skip(),
  "q": Disposition.abort(),
}


class InteractiveDecider:
  """Asks a person at the terminal for each finding."""

  def __init__(
    self,
    console: Console | None = None,
    context: ContextProvider | None = None,
    radius: int = 3,
  ):
    self.console = console or Console()
    self._context = context
    self._radius = radius

  def decide(self, finding: Finding) -> Disposition:
    self._show(finding)
    choice = Prompt.ask(
      "[cyan]What would you like to do?[/cyan] "
      "[green]\\[a]pprove[/green] [yellow]\\[e]dit[/yellow] "
      "[red]\\[s]kip[/red] [blue]\\[q]uit[/blue]",
      choices=list(_CHOICES),
      show_choices=False,
      console=self.console,
    )
    return _CHOICES[choice]

  def revise_text(self, finding: Finding) -> str | None:
    text = Prompt.ask(
      "[yellow]New comment[/yellow] (press Enter to keep original)",
      default="",
      show_default=False,
      console=self.console,
    )
    return text or None

  def _show(self, finding: Finding) -> None:
    body = Text()
    body.append("File: ", style="cyan")
    body.append(f"{finding.file_path}\n", style="green")
    body.append("Line: ", style="cyan")
    body.append(f"{finding.line}\n", style="green")
    body.append("Rule: ", style="cyan")
    body.append(f"{finding.rule_id} ({finding.severity.value})\n\n", style="dim")
    body.append(finding.message)

    self.console.print()
    self.console.print(Panel(body, title="[bold]Review Comment Approval[/bold]", border_style="magenta"))
    self._show_context(finding)

  def _show_context(self, finding: Finding) -> None:
    if self._context is None:
      return
    lines = self._context.context_lines(finding.file_path, finding.line, self._radius)
    if not lines:
      self.console.print(f"[yellow]File not found locally: {escape(finding.file_path)}[/yellow]")
      return

    context = Text()
    for line in lines:
      marker = "> " if line.is_target else "  "
      style = "bold red" if line.is_target else "cyan"
      context.append(f"{marker}{line.number:>5}  {line.text}\n", style=style)
    self.console.print(Panel(context, title="File Context", border_style="magenta"))
