"""Configuration management."""

from patchnote.config.loader import catalog_from_settings, load_config
from patchnote.config.settings import DecisionMode, RuleSpec, Settings

__all__ = ["DecisionMode", "RuleSpec", "Settings", "catalog_from_settings", "load_config"]
