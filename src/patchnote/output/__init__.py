"""Output formatting."""

from patchnote.output.formatter import (
  GitHubFormatter,
  JsonFormatter,
  MarkdownFormatter,
  OutputFormatter,
  TerminalFormatter,
  get_formatter,
  recommendation,
  summary_table,
)

__all__ = [
  "GitHubFormatter",
  "JsonFormatter",
  "MarkdownFormatter",
  "OutputFormatter",
  "TerminalFormatter",
  "get_formatter",
  "recommendation",
  "summary_table",
]
