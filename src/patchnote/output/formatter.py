"""Output formatting for findings and review summaries."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from patchnote.models import Finding, ReviewSummary, Severity


def recommendation(count: int) -> str:
  """Commit recommendation for a number of findings."""
  if count == 0:
    return "Safe to commit"
  if count <= 3:
    return "Review recommended"
  if count <= 8:
    return "Proceed with caution"
  return "Do not commit"


def describe(findings: Sequence[Finding], skipped_files: Sequence[str] = ()) -> str:
  """One-line summary of a set of findings."""
  if not findings:
    text = "No issues found."
  else:
    text = f"Found {len(findings)} issue{'s' if len(findings) != 1 else ''}."
  if skipped_files:
    text += f" Skipped {len(skipped_files)} file(s) with unreadable diffs."
  return text


class OutputFormatter(ABC):
  """Base output formatter."""

  @abstractmethod
  def format(self, findings: Sequence[Finding], skipped_files: Sequence[str] = ()) -> str:
    """Format findings for output."""
    ...


class TerminalFormatter(OutputFormatter):
  """Rich terminal output formatter."""

  SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.INFO: "dim",
  }

  def __init__(self, console: Console | None = None):
    self.console = console or Console()

  def format(self, findings: Sequence[Finding], skipped_files: Sequence[str] = ()) -> str:
    self.console.print()
    self.console.print(Panel(
      describe(findings, skipped_files),
      title="[bold]Diff Review[/bold]",
      border_style="blue",
    ))
    self._print_findings(findings)
    self.console.print(f"\n[bold]{recommendation(len(findings))}[/bold]")
    return ""

  def _print_findings(self, findings: Sequence[Finding]) -> None:
    if not findings:
      self.console.print("\n[green]No issues found.[/green]")
      return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Severity", width=10)
    table.add_column("File", width=30)
    table.add_column("Line", width=6, justify="right")
    table.add_column("Rule", width=8)
    table.add_column("Issue", min_width=40)

    for finding in findings:
      style = self.SEVERITY_STYLES.get(finding.severity, "")
      table.add_row(
        Text(finding.severity.value.upper(), style=style),
        self._make_file_link(finding.file_path, finding.line),
        str(finding.line),
        finding.rule_id,
        Text(finding.message),
      )

    self.console.print()
    self.console.print(table)
    self.console.print(f"\n[dim]{len(findings)} issue(s) found[/dim]")

  def _make_file_link(self, file_path: str, line: int) -> str:
    """Create a clickable file link for terminals that support hyperlinks."""
    url = Path(file_path).resolve().as_uri() + f":{line}"
    return f"[link={url}]{escape(file_path)}[/link]"


class JsonFormatter(OutputFormatter):
  """JSON output formatter."""

  def format(self, findings: Sequence[Finding], skipped_files: Sequence[str] = ()) -> str:
    data = {
      "summary": describe(findings, skipped_files),
      "recommendation": recommendation(len(findings)),
      "skipped_files": list(skipped_files),
      "findings": [
        {
          "file": f.file_path,
          "line": f.line,
          "rule": f.rule_id,
          "severity": f.severity.value,
          "message": f.message,
        }
        for f in findings
      ],
    }
    return json.dumps(data, indent=2)


class MarkdownFormatter(OutputFormatter):
  """Markdown output formatter."""

  def format(self, findings: Sequence[Finding], skipped_files: Sequence[str] = ()) -> str:
    lines = [
      "# Diff Review",
      "",
      "## Summary",
      "",
      describe(findings, skipped_files),
      "",
      f"**Recommendation:** {recommendation(len(findings))}",
      "",
      "## Issues",
      "",
    ]

    if not findings:
      lines.extend(["No issues found.", ""])

    for finding in findings:
      severity = finding.severity.value.upper()
      lines.append(f"### [{severity}] {finding.location} ({finding.rule_id})")
      lines.append("")
      lines.append(finding.message)
      lines.append("")

    return "\n".join(lines)


class GitHubFormatter(OutputFormatter):
  """GitHub Actions workflow command formatter for PR annotations."""

  def format(self, findings: Sequence[Finding], skipped_files: Sequence[str] = ()) -> str:
    lines = []
    for finding in findings:
      level = self._severity_to_level(finding.severity)
      message = (
        f"[{finding.rule_id}] {finding.message}"
        .replace("%", "%25")
        .replace("\r", "%0D")
        .replace("\n", "%0A")
      )
      lines.append(f"::{level} file={finding.file_path},line={finding.line}::{message}")
    return "\n".join(lines)

  def _severity_to_level(self, severity: Severity) -> str:
    if severity in (Severity.CRITICAL, Severity.HIGH):
      return "error"
    if severity == Severity.MEDIUM:
      return "warning"
    return "notice"


def get_formatter(format_type: str) -> OutputFormatter:
  """Get formatter by type name."""
  formatters = {
    "terminal": TerminalFormatter,
    "json": JsonFormatter,
    "markdown": MarkdownFormatter,
    "github": GitHubFormatter,
  }
  formatter_class = formatters.get(format_type)
  if not formatter_class:
    raise ValueError(f"Unknown format: {format_type}")
  return formatter_class()


def summary_table(summary: ReviewSummary) -> Table:
  """Final counts of a review session."""
  table = Table(show_header=False, box=None)
  table.add_column("Count", style="bold")
  table.add_column("Value", justify="right")
  table.add_row("Files analyzed", str(summary.files_analyzed))
  if summary.files_skipped:
    table.add_row("[yellow]Files skipped[/yellow]", str(summary.files_skipped))
  if summary.rule_errors:
    table.add_row("[yellow]Rule errors[/yellow]", str(summary.rule_errors))
  table.add_row("Findings queued", str(summary.queued))
  table.add_row("[green]Approved[/green]", str(summary.approved))
  if summary.edited:
    table.add_row("  edited", str(summary.edited))
  table.add_row("[yellow]Skipped[/yellow]", str(summary.skipped))
  table.add_row("[green]Posted[/green]", str(summary.posted))
  table.add_row("[red]Failed[/red]", str(summary.failed))
  if summary.retryable:
    table.add_row("  retryable", str(summary.retryable))
  return table
