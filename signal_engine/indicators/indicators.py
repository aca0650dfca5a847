"""Technical indicators for signal generation.

Calculations run on NumPy float64 arrays; the public functions take and
return Decimal sequences the same length as their input, with
``Decimal("NaN")`` for positions still inside the warm-up window.

EMA warm-up policy: the first defined value is the SMA of the first
``period`` values (at index ``period - 1``). It is the only seed policy
used anywhere in this package.
"""

from decimal import Decimal
from typing import Sequence

import numpy as np

from signal_engine.models import AnalyzerConfig, Bar, IndicatorSnapshot

NAN = Decimal("NaN")


def _to_array(values: Sequence[Decimal | float]) -> np.ndarray:
    return np.array([float(v) for v in values], dtype=np.float64)


def _to_decimals(arr: np.ndarray) -> list[Decimal]:
    return [Decimal(str(v)) if not np.isnan(v) else NAN for v in arr]


def _to_optional(value: Decimal) -> Decimal | None:
    return None if value.is_nan() else value


# =============================================================================
# NumPy implementations
# =============================================================================

def _sma_array(arr: np.ndarray, period: int) -> np.ndarray:
    """Trailing mean via a running (cumulative) sum, O(n)."""
    result = np.full(len(arr), np.nan)
    if len(arr) < period:
        return result

    csum = np.cumsum(np.concatenate(([0.0], arr)))
    result[period - 1:] = (csum[period:] - csum[:-period]) / period
    return result


def _ema_array(arr: np.ndarray, period: int) -> np.ndarray:
    """EMA seeded with the SMA of the first ``period`` values."""
    result = np.full(len(arr), np.nan)
    if len(arr) < period:
        return result

    multiplier = 2.0 / (period + 1)
    result[period - 1] = np.mean(arr[:period])

    for i in range(period, len(arr)):
        result[i] = arr[i] * multiplier + result[i - 1] * (1 - multiplier)

    return result


def _rsi_array(arr: np.ndarray, period: int) -> np.ndarray:
    """Wilder's RSI, first defined at index ``period``."""
    result = np.full(len(arr), np.nan)
    if len(arr) <= period:
        return result

    deltas = np.diff(arr)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    result[period] = _rsi_value(avg_gain, avg_loss)

    # deltas[i - 1] is the change from close i-1 to close i
    for i in range(period + 1, len(arr)):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    value = 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)
    return min(max(value, 0.0), 100.0)


def _macd_arrays(
    arr: np.ndarray, fast: int, slow: int, signal: int
) -> tuple[np.ndarray, np.ndarray]:
    """MACD line and signal line (signal computed over the defined MACD)."""
    macd_line = _ema_array(arr, fast) - _ema_array(arr, slow)
    signal_line = np.full(len(arr), np.nan)

    defined = np.flatnonzero(~np.isnan(macd_line))
    if len(defined) == 0:
        return macd_line, signal_line

    start = int(defined[0])
    signal_line[start:] = _ema_array(macd_line[start:], signal)
    return macd_line, signal_line


# =============================================================================
# Public API
# =============================================================================

def sma(values: Sequence[Decimal | float], period: int) -> list[Decimal]:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of values
        period: SMA period

    Returns:
        List of SMA values (NaN for the first ``period - 1`` values)
    """
    return _to_decimals(_sma_array(_to_array(values), period))


def ema(values: Sequence[Decimal | float], period: int) -> list[Decimal]:
    """
    Calculate Exponential Moving Average.

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        List of EMA values (same length as input, with NaN for initial values)
    """
    return _to_decimals(_ema_array(_to_array(values), period))


def rsi(closes: Sequence[Decimal | float], period: int = 14) -> list[Decimal]:
    """
    Calculate Relative Strength Index using Wilder's smoothing.

    RSI needs a prior close to form the first change, so the first
    defined value is at index ``period``. Returns 100 when there were no
    losses over the smoothing window.

    Args:
        closes: Sequence of close prices
        period: RSI period

    Returns:
        List of RSI values in [0, 100]
    """
    return _to_decimals(_rsi_array(_to_array(closes), period))


def macd(
    closes: Sequence[Decimal | float],
    fast: int = 8,
    slow: int = 17,
    signal: int = 9,
) -> tuple[list[Decimal], list[Decimal], list[Decimal]]:
    """
    Calculate MACD line, signal line and histogram.

    macd      = EMA(fast) - EMA(slow)
    signal    = EMA(macd, signal), over the defined part of the MACD line
    histogram = macd - signal

    Args:
        closes: Sequence of close prices
        fast: Fast EMA period
        slow: Slow EMA period
        signal: Signal line EMA period

    Returns:
        Tuple of (macd, signal, histogram) lists
    """
    macd_arr, signal_arr = _macd_arrays(_to_array(closes), fast, slow, signal)
    macd_line = _to_decimals(macd_arr)
    signal_line = _to_decimals(signal_arr)

    # Subtract the Decimal values so histogram == macd - signal exactly
    histogram = [
        NAN if m.is_nan() or s.is_nan() else m - s
        for m, s in zip(macd_line, signal_line)
    ]
    return macd_line, signal_line, histogram


def compute_indicators(bars: Sequence[Bar], config: AnalyzerConfig) -> list[IndicatorSnapshot]:
    """Compute one IndicatorSnapshot per bar (same length, same order)."""
    return IndicatorCalculator(config).snapshots(bars)


# =============================================================================
# IndicatorCalculator class
# =============================================================================

class IndicatorCalculator:
    """Calculator for all indicators needed by the signal analyzer."""

    def __init__(self, config: AnalyzerConfig | None = None):
        self.config = config or AnalyzerConfig()

    def calculate_all(
        self,
        closes: Sequence[Decimal],
        volumes: Sequence[Decimal],
    ) -> dict[str, list[Decimal]]:
        """
        Calculate all indicators for the given close/volume series.

        Args:
            closes: List of close prices
            volumes: List of volumes

        Returns:
            Dict with all indicator values at each index
        """
        cfg = self.config
        macd_line, signal_line, histogram = macd(
            closes, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal_period
        )

        return {
            "ema_fast": ema(closes, cfg.macd_fast),
            "ema_slow": ema(closes, cfg.macd_slow),
            "rsi": rsi(closes, cfg.rsi_period),
            "macd": macd_line,
            "macd_signal": signal_line,
            "macd_histogram": histogram,
            "volume_sma": sma(volumes, cfg.volume_period),
        }

    def snapshots(self, bars: Sequence[Bar]) -> list[IndicatorSnapshot]:
        """Calculate snapshots aligned 1:1 with *bars*."""
        if not bars:
            return []

        values = self.calculate_all(
            [b.close for b in bars], [b.volume for b in bars]
        )

        result = []
        for i, bar in enumerate(bars):
            result.append(
                IndicatorSnapshot(
                    timestamp=bar.timestamp,
                    close=bar.close,
                    volume=bar.volume,
                    **{name: _to_optional(series[i]) for name, series in values.items()},
                )
            )
        return result

    def calculate_latest(self, bars: Sequence[Bar]) -> IndicatorSnapshot | None:
        """
        Calculate indicators for the latest bar only.

        Returns:
            Snapshot for the last bar, or None if not enough history
        """
        pair = self.latest_pair(bars)
        return pair[1] if pair else None

    def latest_pair(
        self, bars: Sequence[Bar]
    ) -> tuple[IndicatorSnapshot, IndicatorSnapshot] | None:
        """
        Calculate snapshots for the previous and latest bars.

        Returns:
            (previous, current), or None if not enough history
        """
        if len(bars) < self.config.min_history:
            return None

        snaps = self.snapshots(bars)
        return snaps[-2], snaps[-1]
