"""Built-in decision rules.

Two rules are available and exactly one is used per deployment:

- crossover_strict: MACD/signal crossover between the previous and the
  current bar, confirmed by RSI inside the (rsi_lower, rsi_upper) band.
- confirmation_scoring: single-bar scoring of MACD position, RSI zone
  and volume against its moving average.
"""

from decimal import Decimal

from signal_engine.analyzer.protocol import RuleDecision
from signal_engine.analyzer.registry import register_rule
from signal_engine.models import AnalyzerConfig, IndicatorSnapshot, SignalType

CROSSOVER_STRICT = "crossover_strict"
CONFIRMATION_SCORING = "confirmation_scoring"

# Width of the oversold / overbought zones used by confirmation scoring
RSI_ZONE_WIDTH = 10


@register_rule
class CrossoverStrictRule:
    """Two-bar MACD crossover with an RSI band filter.

    - BUY: MACD crosses above its signal line, rsi_lower < RSI < rsi_upper
    - SELL: MACD crosses below its signal line, same RSI band
    """

    @property
    def name(self) -> str:
        return CROSSOVER_STRICT

    def decide(
        self,
        current: IndicatorSnapshot,
        previous: IndicatorSnapshot | None,
        config: AnalyzerConfig,
    ) -> RuleDecision | None:
        # Need previous values to detect crossover
        if previous is None or previous.macd is None or previous.macd_signal is None:
            return None

        if not config.rsi_lower < current.rsi < config.rsi_upper:
            return None

        cross_up = previous.macd < previous.macd_signal and current.macd > current.macd_signal
        cross_down = previous.macd > previous.macd_signal and current.macd < current.macd_signal

        if cross_up:
            return RuleDecision(SignalType.BUY)
        if cross_down:
            return RuleDecision(SignalType.SELL)
        return None


@register_rule
class ConfirmationScoringRule:
    """Single-bar confirmation scoring.

    Buy points:
    - MACD above signal and not deeply negative (macd > -depth)
    - RSI in the oversold zone [rsi_lower, rsi_lower + 10]
    - Volume above its moving average

    Sell points mirror these (MACD below signal and not deeply positive,
    RSI in [rsi_upper - 10, rsi_upper]). A side qualifies once it reaches
    ``min_confirmations``. When both sides qualify, BUY is emitted only if
    its score is strictly higher; otherwise nothing is emitted.

    ``depth`` is ``macd_depth_ratio * close``, so the MACD test scales
    with the price of the pair.
    """

    @property
    def name(self) -> str:
        return CONFIRMATION_SCORING

    def score(
        self, current: IndicatorSnapshot, config: AnalyzerConfig
    ) -> tuple[int, int]:
        """Return (buy_score, sell_score) for the current snapshot."""
        depth = current.close * Decimal(str(config.macd_depth_ratio))

        volume_ok = (
            current.volume_sma is not None and current.volume > current.volume_sma
        )

        buy = 0
        sell = 0

        if current.macd > current.macd_signal and current.macd > -depth:
            buy += 1
        if config.rsi_lower <= current.rsi <= config.rsi_lower + RSI_ZONE_WIDTH:
            buy += 1
        if volume_ok:
            buy += 1

        if current.macd < current.macd_signal and current.macd < depth:
            sell += 1
        if config.rsi_upper - RSI_ZONE_WIDTH <= current.rsi <= config.rsi_upper:
            sell += 1
        if volume_ok:
            sell += 1

        return buy, sell

    def decide(
        self,
        current: IndicatorSnapshot,
        previous: IndicatorSnapshot | None,
        config: AnalyzerConfig,
    ) -> RuleDecision | None:
        buy, sell = self.score(current, config)
        buy_ok = buy >= config.min_confirmations
        sell_ok = sell >= config.min_confirmations

        if buy_ok and sell_ok:
            if buy > sell:
                return RuleDecision(SignalType.BUY, confirmations=buy)
            return None
        if buy_ok:
            return RuleDecision(SignalType.BUY, confirmations=buy)
        if sell_ok:
            return RuleDecision(SignalType.SELL, confirmations=sell)
        return None
