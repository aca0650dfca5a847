"""Signal analyzer and decision rules.

Public API:
- SignalAnalyzer: schedule gating (startup guard, cooldown) + decision rule
- DecisionRule: Protocol that decision rules must implement
- RuleDecision: Standard return type from a decision rule
- register_rule / create_rule / list_rules: rule registry

Importing this package registers the built-in rules.
"""

from signal_engine.analyzer.protocol import DecisionRule, RuleDecision
from signal_engine.analyzer.registry import register_rule, create_rule, list_rules
from signal_engine.analyzer.rules import (
    CONFIRMATION_SCORING,
    CROSSOVER_STRICT,
    ConfirmationScoringRule,
    CrossoverStrictRule,
)
from signal_engine.analyzer.analyzer import DEFAULT_GUARD_WINDOW, SignalAnalyzer

__all__ = [
    "SignalAnalyzer",
    "DEFAULT_GUARD_WINDOW",
    "DecisionRule",
    "RuleDecision",
    "register_rule",
    "create_rule",
    "list_rules",
    "CROSSOVER_STRICT",
    "CONFIRMATION_SCORING",
    "CrossoverStrictRule",
    "ConfirmationScoringRule",
]
