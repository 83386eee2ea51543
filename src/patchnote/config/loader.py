"""Configuration file loading."""

from pathlib import Path

import yaml

from patchnote.config.settings import DecisionMode, RuleSpec, Settings
from patchnote.rules.base import Rule
from patchnote.rules.registry import build_catalog

CONFIG_FILENAMES = [".patchnote.yaml", ".patchnote.yml", "patchnote.yaml", "patchnote.yml"]


def _find_config_file(config_path: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path:
    if not config_path.exists():
      raise FileNotFoundError(f"Config file not found: {config_path}")
    return config_path

  for filename in CONFIG_FILENAMES:
    path = Path.cwd() / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None) -> Settings:
  """Load configuration from file or defaults."""
  path = _find_config_file(config_path)
  if path:
    return _load_from_file(path)
  return Settings()


def _load_from_file(path: Path) -> Settings:
  """Load settings from a YAML file."""
  with open(path) as f:
    data = yaml.safe_load(f) or {}

  if not isinstance(data, dict):
    raise ValueError(f"Config file {path} must contain a mapping")
  return _parse_config(data)


def _parse_config(data: dict) -> Settings:
  """Parse config dict into Settings."""
  if "decision" in data:
    data["decision"] = DecisionMode(data["decision"])

  if "rules" in data:
    data["rules"] = [RuleSpec(**spec) for spec in data["rules"] or []]

  return Settings(**data)


def catalog_from_settings(settings: Settings) -> tuple[Rule, ...]:
  """Build the session's rule catalog from built-ins plus configured rules."""
  return build_catalog(
    disabled=settings.disabled_rules,
    extra=[spec.to_rule() for spec in settings.rules],
  )
