"""Decision rules available to a deployment, keyed by rule name.

A rule class is registered under its own ``name`` (the same string that
ends up in ``Signal.rule``), so a configured rule name, the registered
class and emitted signals can never disagree.
"""

import logging

from signal_engine.analyzer.protocol import DecisionRule

logger = logging.getLogger(__name__)

_RULES: dict[str, type] = {}


def register_rule(cls: type) -> type:
    """Class decorator making a stateless decision rule selectable by name.

    Raises:
        TypeError: The class does not satisfy DecisionRule.
        ValueError: Another class already uses the same rule name.
    """
    rule = cls()
    if not isinstance(rule, DecisionRule):
        raise TypeError(f"{cls.__name__} must define name and decide()")

    owner = _RULES.get(rule.name)
    if owner is not None and owner is not cls:
        raise ValueError(
            f"Decision rule name '{rule.name}' already belongs to {owner.__name__}"
        )
    _RULES[rule.name] = cls
    logger.debug(f"Decision rule '{rule.name}' available ({cls.__name__})")
    return cls


def create_rule(rule: str | DecisionRule) -> DecisionRule:
    """Return a rule instance for a configured name.

    An object already implementing DecisionRule is returned unchanged, so
    callers can pass either a deployment setting or a custom rule.

    Raises:
        KeyError: The name is not a registered rule.
        TypeError: The object is neither a name nor a DecisionRule.
    """
    if not isinstance(rule, str):
        if not isinstance(rule, DecisionRule):
            raise TypeError(f"Not a decision rule: {rule!r}")
        return rule

    cls = _RULES.get(rule)
    if cls is None:
        raise KeyError(
            f"Unknown decision rule '{rule}' (configure one of: "
            f"{', '.join(list_rules()) or 'none'})"
        )
    return cls()


def list_rules() -> list[str]:
    """Names accepted by create_rule, sorted."""
    return sorted(_RULES)
