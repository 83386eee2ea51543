"""Rule registration and catalog assembly."""

import importlib
from typing import Iterable

from patchnote.rules.base import Rule

# Built-in catalog modules, in catalog order. Each exposes a RULES tuple.
CATALOG_MODULES = (
  "patchnote.rules.swift",
  "patchnote.rules.docs",
  "patchnote.rules.scripts",
  "patchnote.rules.general",
)

_rules: dict[str, Rule] = {}


def register_rule(rule: Rule) -> None:
  """Register a rule after the built-ins.

  Registering an existing id replaces that rule at its position.
  """
  _rules[rule.id] = rule


def get_all_rules() -> list[Rule]:
  """Get built-in and registered rules in catalog order."""
  catalog = RuleRegistry.builtin()
  catalog.update(_rules)
  return list(catalog.values())


def list_rules() -> list[str]:
  """List all rule IDs in catalog order."""
  return [rule.id for rule in get_all_rules()]


def build_catalog(
  disabled: Iterable[str] = (),
  extra: Iterable[Rule] = (),
) -> tuple[Rule, ...]:
  """Assemble the immutable catalog for one session.

  Args:
    disabled: Rule ids to leave out.
    extra: Additional rules appended after the registered ones. An extra
           rule whose id is already present replaces it in place.

  Returns:
    Ordered tuple of rules.
  """
  skip = set(disabled)
  catalog = {rule.id: rule for rule in get_all_rules()}
  for rule in extra:
    catalog[rule.id] = rule
  return tuple(rule for rule_id, rule in catalog.items() if rule_id not in skip)


class RuleRegistry:
  """Loads the built-in catalog modules."""

  @staticmethod
  def builtin() -> dict[str, Rule]:
    """Return built-in rules keyed by id, in catalog order."""
    catalog: dict[str, Rule] = {}
    for module_name in CATALOG_MODULES:
      module = importlib.import_module(module_name)
      for rule in module.RULES:
        catalog[rule.id] = rule
    return catalog
