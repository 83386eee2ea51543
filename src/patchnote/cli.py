"""CLI interface using Typer."""

import logging
import os
import traceback
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from patchnote import __version__
from patchnote.config import DecisionMode, catalog_from_settings, load_config
from patchnote.output import get_formatter, summary_table
from patchnote.review import run_review, run_scan
from patchnote.sources import SourceError

app = typer.Typer(
  name="patchnote",
  help="Rule-based pull request review with human approval before posting",
  no_args_is_help=True,
)

console = Console()

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _is_debug() -> bool:
  return os.environ.get("PATCHNOTE_DEBUG", "").lower() in ("1", "true", "yes")


def _configure_logging(debug: bool) -> None:
  logging.basicConfig(
    level=logging.DEBUG if debug else logging.WARNING,
    format=_LOG_FORMAT,
  )


def _fail(error: Exception, show_traceback: bool) -> NoReturn:
  console.print(f"[red]Error:[/red] {error}")
  if show_traceback:
    console.print("\n[dim]Traceback:[/dim]")
    console.print(traceback.format_exc(), markup=False)
  raise typer.Exit(1) from None


def version_callback(value: bool) -> None:
  if value:
    console.print(f"patchnote {__version__}")
    raise typer.Exit()


@app.callback()
def main(
  version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
  """Review pull requests with deterministic rules."""


@app.command()
def review(
  number: str = typer.Argument(..., help="Pull request number"),
  repo: str = typer.Option(None, "--repo", "-r", help="Repository as owner/name"),
  yes: bool = typer.Option(False, "--yes", "-y", help="Approve every finding without prompting"),
  policy: bool = typer.Option(False, "--policy", help="Decide from approve_rules/skip_rules"),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Show full traceback on errors"),
) -> None:
  """Analyze a pull request and post approved findings as review comments."""
  show_traceback = debug or _is_debug()
  _configure_logging(show_traceback)

  if yes and policy:
    console.print("[red]Error:[/red] --yes and --policy are mutually exclusive")
    raise typer.Exit(1)

  decision = None
  if yes:
    decision = DecisionMode.APPROVE
  elif policy:
    decision = DecisionMode.POLICY

  try:
    analysis, summary = run_review(
      number,
      repo=repo,
      decision=decision,
      config_path=config,
      console=console,
    )
  except (SourceError, FileNotFoundError, ValueError) as e:
    _fail(e, show_traceback=False)
  except Exception as e:
    _fail(e, show_traceback)

  if analysis.skipped_files:
    console.print(
      f"[yellow]Skipped {len(analysis.skipped_files)} file(s) with unreadable diffs:[/yellow] "
      + escape(", ".join(analysis.skipped_files))
    )
  if summary.aborted:
    console.print(
      f"[yellow]Review aborted after {summary.presented} of {summary.queued} findings; "
      "the rest were not presented.[/yellow]"
    )

  console.print()
  console.print(summary_table(summary))
  for failure in summary.failures:
    console.print(f"[red]Failed:[/red] {escape(failure)}")
  if analysis.change_set.url:
    console.print(f"\n{analysis.change_set.url}")


@app.command()
def scan(
  base: str = typer.Option(None, "--base", "-b", help="Compare HEAD against this branch"),
  staged: bool = typer.Option(False, "--staged", "-s", help="Scan staged changes only"),
  format_type: str = typer.Option(
    "terminal", "--format", help="Output format: terminal, json, markdown, github"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  exit_code: bool = typer.Option(
    False, "--exit-code", "-e", help="Exit with code 1 if any finding is reported"
  ),
  debug: bool = typer.Option(False, "--debug", "-d", help="Show full traceback on errors"),
) -> None:
  """Report findings for local changes without posting anything.

  With no options, scans uncommitted changes in the working tree.
  """
  show_traceback = debug or _is_debug()
  _configure_logging(show_traceback)

  try:
    formatter = get_formatter(format_type)
    analysis = run_scan(base=base, staged=staged, config_path=config)
  except (SourceError, FileNotFoundError, ValueError) as e:
    _fail(e, show_traceback=False)
  except Exception as e:
    _fail(e, show_traceback)

  findings = list(analysis.queue)
  output = formatter.format(findings, analysis.skipped_files)
  if output:
    console.print(output, markup=False, highlight=False, soft_wrap=True)

  if exit_code and findings:
    raise typer.Exit(1)


@app.command("rules")
def list_catalog(
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
  """List the active rule catalog in evaluation order."""
  try:
    catalog = catalog_from_settings(load_config(config))
  except (FileNotFoundError, ValueError) as e:
    _fail(e, show_traceback=False)

  table = Table(show_header=True, header_style="bold")
  table.add_column("ID", width=8)
  table.add_column("Name")
  table.add_column("Severity", width=10)
  table.add_column("Paths")
  for rule in catalog:
    table.add_row(
      rule.id,
      rule.name,
      rule.severity.value,
      ", ".join(getattr(rule, "paths", ("*",))),
    )
  console.print(table)


if __name__ == "__main__":
  app()
