"""Application settings."""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from patchnote.models import Severity
from patchnote.rules.base import PatternRule, compile_pattern


class DecisionMode(Enum):
  """Where finding dispositions come from."""

  INTERACTIVE = "interactive"
  APPROVE = "approve"
  POLICY = "policy"


class RuleSpec(BaseModel):
  """A pattern rule declared in the config file."""

  id: str
  name: str
  message: str
  pattern: str | None = None
  anchor: str | None = None
  requires: str | None = None
  absent: str | None = None
  paths: list[str] = Field(default_factory=lambda: ["*"])
  severity: Severity = Severity.INFO

  @field_validator("pattern", "anchor", "requires", "absent")
  @classmethod
  def _valid_regex(cls, value: str | None) -> str | None:
    if value is not None:
      try:
        re.compile(value)
      except re.error as e:
        raise ValueError(f"invalid regular expression {value!r}: {e}") from e
    return value

  def to_rule(self) -> PatternRule:
    return PatternRule(
      id=self.id,
      name=self.name,
      message=self.message,
      pattern=_compile(self.pattern),
      anchor=_compile(self.anchor),
      requires=_compile(self.requires),
      absent=_compile(self.absent),
      paths=tuple(self.paths),
      severity=self.severity,
    )


def _compile(expr: str | None) -> re.Pattern[str] | None:
  return compile_pattern(expr) if expr is not None else None


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(use_enum_values=False)

  repo: str | None = None
  api_url: str = "https://api.github.com"
  token_env: str = "GITHUB_TOKEN"
  timeout: float = 10.0
  max_retries: int = Field(default=2, ge=0)
  context_radius: int = Field(default=3, ge=0)
  decision: DecisionMode = DecisionMode.INTERACTIVE
  approve_rules: list[str] = Field(default_factory=list)
  skip_rules: list[str] = Field(default_factory=list)
  disabled_rules: list[str] = Field(default_factory=list)
  rules: list[RuleSpec] = Field(default_factory=list)
