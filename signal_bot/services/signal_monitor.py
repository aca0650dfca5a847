"""Periodic signal monitor for one symbol/timeframe.

Each tick runs outside the analyzer's timing-sensitive part:

1. Fetch recent bars (exchange, or synthetic when the fallback is enabled)
2. Merge them into the rolling BarBuffer
3. Compute the previous/current indicator snapshots
4. Ask the SignalAnalyzer for a decision
5. Hand an emitted Signal to the registered callbacks

Ticks are single-flight: a tick that fires while the previous one is
still running is skipped, so EngineState is never mutated concurrently.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable

import httpx

from signal_bot.monitor_config import PairConfig
from signal_bot.services.bar_source import FallbackBarSource
from signal_engine.analyzer import RuleDecision, SignalAnalyzer
from signal_engine.indicators import IndicatorCalculator
from signal_engine.models import BarBuffer, EngineState, IndicatorSnapshot, Signal

logger = logging.getLogger(__name__)

# Type alias for signal callback
SignalCallback = Callable[[Signal], Awaitable[None]]


def format_uptime(delta: timedelta) -> str:
    """Format a duration as 'Hh Mm'."""
    total_minutes = max(int(delta.total_seconds()) // 60, 0)
    return f"{total_minutes // 60}h {total_minutes % 60}m"


@dataclass
class MonitorStatus:
    """Snapshot of a monitor's run state."""

    symbol: str
    timeframe: str
    rule: str
    is_running: bool
    uptime: str
    last_signal_at: datetime | None
    simulated: bool


class SignalMonitor:
    """Drive a SignalAnalyzer for one symbol/timeframe on a fixed tick."""

    def __init__(
        self,
        pair: PairConfig,
        source: FallbackBarSource,
        analyzer: SignalAnalyzer | None = None,
        bar_limit: int = 100,
        clock: Callable[[], datetime] | None = None,
    ):
        self.pair = pair
        self.source = source
        self.analyzer = analyzer or SignalAnalyzer()
        self.bar_limit = bar_limit
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self.state = EngineState()
        self.calculator = IndicatorCalculator(pair.config)
        self.buffer = self._new_buffer()

        self._callbacks: list[SignalCallback] = []
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()
        self._simulated = False

        self.skipped_ticks = 0

    def _new_buffer(self) -> BarBuffer:
        return BarBuffer(
            symbol=self.pair.symbol,
            timeframe=self.pair.timeframe,
            max_size=max(self.bar_limit, self.pair.config.min_history),
        )

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    @property
    def is_busy(self) -> bool:
        """A tick is currently in flight."""
        return self._lock.locked()

    def on_signal(self, callback: SignalCallback) -> None:
        """Register callback for new signals."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def off_signal(self, callback: SignalCallback) -> None:
        """Unregister callback for new signals."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, now: datetime | None = None) -> None:
        self.analyzer.start(self.state, now or self._clock())
        logger.info(
            f"Monitor started for {self.pair.symbol} on {self.pair.timeframe} "
            f"({self.analyzer.rule_name})"
        )

    def stop(self) -> None:
        """Stop scheduling ticks. An in-flight tick is allowed to finish."""
        self.analyzer.stop(self.state)
        logger.info(f"Monitor stopped for {self.pair.symbol} on {self.pair.timeframe}")

    def status(self, now: datetime | None = None) -> MonitorStatus:
        now = now or self._clock()
        if self.state.is_running and self.state.started_at is not None:
            uptime = format_uptime(now - self.state.started_at)
        else:
            uptime = "0h 0m"
        return MonitorStatus(
            symbol=self.pair.symbol,
            timeframe=self.pair.timeframe,
            rule=self.analyzer.rule_name,
            is_running=self.state.is_running,
            uptime=uptime,
            last_signal_at=self.state.last_alert_at,
            simulated=self._simulated,
        )

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def tick(self, now: datetime | None = None) -> Signal | None:
        """Run one evaluation cycle.

        Returns:
            The emitted Signal, or None (not running, skipped, fetch
            failure, insufficient data, suppressed or no condition).
        """
        if not self.state.is_running:
            return None

        if self._lock.locked():
            self.skipped_ticks += 1
            logger.warning(
                f"{self.pair.key}: previous tick still running, skipping "
                f"(skipped={self.skipped_ticks})"
            )
            return None

        async with self._lock:
            try:
                batch = await self.source.fetch(
                    self.pair.symbol, self.pair.timeframe, self.bar_limit
                )
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"{self.pair.key}: failed to fetch bars: {e}")
                return None

            # Never mix live and synthetic bars in one series
            if batch.simulated != self._simulated:
                self.buffer = self._new_buffer()
                self._simulated = batch.simulated
            self.buffer.extend(batch.bars)

            snapshots = self.calculator.latest_pair(self.buffer.bars)
            if snapshots is None:
                logger.info(
                    f"{self.pair.key}: insufficient data for signal analysis "
                    f"({len(self.buffer)}/{self.pair.config.min_history} bars)"
                )
                return None

            previous, current = snapshots
            signal = self.analyzer.evaluate(
                current,
                previous,
                self.pair.config,
                self.state,
                now or self._clock(),
                symbol=self.pair.symbol,
                timeframe=self.pair.timeframe,
                simulated=batch.simulated,
            )

        if signal:
            await self._dispatch(signal)
        return signal

    async def _dispatch(self, signal: Signal) -> None:
        for callback in self._callbacks:
            try:
                await callback(signal)
            except Exception as e:
                logger.error(f"Signal callback error: {e}")

    async def preview(self) -> tuple[IndicatorSnapshot, RuleDecision | None] | None:
        """Analyze the latest bars without touching session state.

        Ignores cooldown and startup guard; useful for on-demand checks.

        Returns:
            (latest snapshot, decision), or None if not enough history
        """
        batch = await self.source.fetch(
            self.pair.symbol, self.pair.timeframe, self.bar_limit
        )
        snapshots = self.calculator.latest_pair(batch.bars)
        if snapshots is None:
            return None
        previous, current = snapshots
        return current, self.analyzer.decide(current, previous, self.pair.config)

    def _on_tick_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"{self.pair.key}: tick failed: {error!r}",
                exc_info=error,
            )

    async def run(self, interval: float) -> None:
        """Fire a tick every *interval* seconds until stopped.

        Ticks are scheduled as tasks, so a slow fetch does not delay the
        timer; overlapping ticks are skipped by the single-flight guard.
        A tick that raises is logged and the loop keeps going.
        """
        if not self.state.is_running:
            self.start()

        while self.state.is_running:
            task = asyncio.create_task(self.tick())
            self._pending.add(task)
            task.add_done_callback(self._on_tick_done)
            await asyncio.sleep(interval)

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
