"""Rule catalog and engine."""

from patchnote.rules.base import PatternRule, Rule, RuleHit, RuleInput, SizeRule
from patchnote.rules.engine import AnalysisResult, RuleEngine, RuleEvaluationError
from patchnote.rules.registry import build_catalog, get_all_rules, list_rules, register_rule

__all__ = [
  "AnalysisResult",
  "PatternRule",
  "Rule",
  "RuleEngine",
  "RuleEvaluationError",
  "RuleHit",
  "RuleInput",
  "SizeRule",
  "build_catalog",
  "get_all_rules",
  "list_rules",
  "register_rule",
]
