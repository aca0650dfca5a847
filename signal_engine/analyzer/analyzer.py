"""Signal analyzer: schedule gating plus decision rule.

This module is pure business logic with no I/O dependencies. Time is
always passed in by the caller, and persistence/notification happen in
the caller once a Signal is returned.

State machine per session (EngineState):

    Stopped --start(now)--> Running (startup guard until now + guard_window)
    Running --evaluate--> guard? cooldown? data? rule -> Signal | None
    Running --stop()--> Stopped (last_alert_at kept unless configured)
"""

import logging
from datetime import datetime, timedelta

from signal_engine.analyzer.protocol import DecisionRule, RuleDecision
from signal_engine.analyzer.registry import create_rule
from signal_engine.analyzer.rules import CROSSOVER_STRICT
from signal_engine.models import (
    AnalyzerConfig,
    EngineState,
    IndicatorSnapshot,
    Signal,
)

logger = logging.getLogger(__name__)

DEFAULT_GUARD_WINDOW = timedelta(minutes=2)


class SignalAnalyzer:
    """Emit at most one BUY/SELL signal per evaluation.

    Args:
        rule: Registered decision rule name, or a DecisionRule instance.
        guard_window: Quiet period after start() during which nothing
            is emitted.
        reset_cooldown_on_restart: Clear last_alert_at on start(), so a
            restarted session is not held back by the previous cooldown.
    """

    def __init__(
        self,
        rule: str | DecisionRule = CROSSOVER_STRICT,
        guard_window: timedelta = DEFAULT_GUARD_WINDOW,
        reset_cooldown_on_restart: bool = False,
    ):
        self.rule: DecisionRule = create_rule(rule)
        self.guard_window = guard_window
        self.reset_cooldown_on_restart = reset_cooldown_on_restart

    @property
    def rule_name(self) -> str:
        return self.rule.name

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, state: EngineState, now: datetime) -> None:
        """Start a session and arm the startup guard."""
        if state.is_running:
            return

        state.is_running = True
        state.started_at = now
        state.startup_guard_until = now + self.guard_window
        if self.reset_cooldown_on_restart:
            state.last_alert_at = None

        logger.info(
            f"Analyzer started ({self.rule_name}), "
            f"startup guard until {state.startup_guard_until.isoformat()}"
        )

    def stop(self, state: EngineState) -> None:
        """Stop a session. Does not interrupt an in-flight evaluation."""
        if not state.is_running:
            return

        state.is_running = False
        state.startup_guard_until = None
        logger.info("Analyzer stopped")

    def on_signal_emitted(self, state: EngineState, now: datetime) -> None:
        """Record an emitted signal, starting the cooldown."""
        state.last_alert_at = now

    # ------------------------------------------------------------------
    # Core logic
    # ------------------------------------------------------------------

    def decide(
        self,
        current: IndicatorSnapshot,
        previous: IndicatorSnapshot | None,
        config: AnalyzerConfig,
    ) -> RuleDecision | None:
        """Apply the decision rule without consulting or touching state."""
        if not current.has_core_values:
            return None
        return self.rule.decide(current, previous, config)

    def evaluate(
        self,
        current: IndicatorSnapshot,
        previous: IndicatorSnapshot | None,
        config: AnalyzerConfig,
        state: EngineState,
        now: datetime,
        *,
        symbol: str,
        timeframe: str,
        simulated: bool = False,
    ) -> Signal | None:
        """Evaluate the latest snapshot and emit a signal if one qualifies.

        Args:
            current: Snapshot of the latest bar
            previous: Snapshot of the bar before it (crossover rules)
            config: Validated analyzer configuration
            state: Session state, mutated on guard expiry and emission
            now: Evaluation time
            symbol: Symbol the snapshots belong to
            timeframe: Timeframe the snapshots belong to
            simulated: Snapshots were derived from synthetic bars

        Returns:
            Signal if one was emitted, None otherwise
        """
        if not state.is_running:
            return None

        if state.startup_guard_until is not None:
            if now < state.startup_guard_until:
                logger.debug(f"{symbol} {timeframe}: startup guard active")
                return None
            state.startup_guard_until = None

        if state.last_alert_at is not None and now - state.last_alert_at < config.cooldown:
            logger.debug(f"{symbol} {timeframe}: cooldown active")
            return None

        if not current.has_core_values:
            logger.debug(f"{symbol} {timeframe}: insufficient data for analysis")
            return None

        decision = self.rule.decide(current, previous, config)
        if decision is None:
            return None

        signal = Signal(
            symbol=symbol,
            timeframe=timeframe,
            type=decision.type,
            price=current.close,
            rsi=current.rsi,
            macd=current.macd,
            macd_signal=current.macd_signal,
            volume=current.volume,
            emitted_at=now,
            rule=self.rule_name,
            confirmations=decision.confirmations,
            simulated=simulated,
        )
        self.on_signal_emitted(state, now)

        logger.info(
            f"{signal.type.value}: {symbol} {timeframe} @ {signal.price} "
            f"rsi={signal.rsi} macd={signal.macd} signal={signal.macd_signal}"
            + (" [simulated]" if simulated else "")
        )
        return signal
