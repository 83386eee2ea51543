"""Shell script and repository config rules."""

from patchnote.models import Severity
from patchnote.rules.base import PatternRule
from patchnote.rules.base import compile_pattern as _re

SHELL = ("*.sh", "*.bash")

RULES = (
  PatternRule(
    id="SH001",
    name="curl-without-timeout",
    pattern=_re(r"curl.*[ \t]-\w*s"),
    absent=_re(r"--max-time|--connect-timeout|\s-m\s*\d"),
    paths=SHELL,
    severity=Severity.MEDIUM,
    message=(
      "**Security**: Add timeout and retry options to curl commands, "
      "and validate API responses before processing them."
    ),
  ),
  PatternRule(
    id="SH002",
    name="missing-errexit",
    absent=_re(r"^\s*set\s+-\w*e"),
    paths=SHELL,
    severity=Severity.LOW,
    message="**Best Practice**: Add 'set -e' at the top of the script to exit on errors.",
  ),
  PatternRule(
    id="SH003",
    name="unquoted-echo",
    pattern=_re(r"\becho\s+[^\"'\n]*\$\w"),
    paths=SHELL,
    severity=Severity.LOW,
    message=(
      "**Potential Issue**: Unquoted variables in echo statements are subject to "
      "word splitting. Wrap them in double quotes."
    ),
  ),
  PatternRule(
    id="GIT001",
    name="ignored-secrets",
    pattern=_re(r"\.env|config.*\.json"),
    paths=(".gitignore",),
    severity=Severity.INFO,
    message=(
      "**Security**: Good practice ignoring environment and config files. "
      "Make sure all sensitive files are covered."
    ),
  ),
)
