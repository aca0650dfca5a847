"""Decision rule protocol.

This module provides:
- RuleDecision: Standard return type from a decision rule
- DecisionRule: Runtime-checkable Protocol that decision rules must satisfy
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from signal_engine.models import AnalyzerConfig, IndicatorSnapshot, SignalType


@dataclass(frozen=True)
class RuleDecision:
    """Outcome of applying a decision rule to a snapshot.

    Attributes:
        type: BUY or SELL.
        confirmations: Number of conditions that held (scoring rules only).
    """

    type: SignalType
    confirmations: int | None = None


@runtime_checkable
class DecisionRule(Protocol):
    """Protocol that all decision rules must implement.

    Rules are stateless: cooldown and startup guard are handled by the
    analyzer before a rule is consulted.
    """

    @property
    def name(self) -> str:
        """Unique rule identifier (e.g., 'crossover_strict')."""
        ...

    def decide(
        self,
        current: IndicatorSnapshot,
        previous: IndicatorSnapshot | None,
        config: AnalyzerConfig,
    ) -> RuleDecision | None:
        """Classify the current snapshot as BUY, SELL or nothing.

        The caller guarantees rsi, macd and macd_signal are defined on
        *current*.
        """
        ...
