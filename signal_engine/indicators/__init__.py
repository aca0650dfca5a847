"""Technical indicators (pure math, no I/O)."""

from signal_engine.indicators.indicators import (
    sma,
    ema,
    rsi,
    macd,
    compute_indicators,
    IndicatorCalculator,
)

__all__ = [
    "sma",
    "ema",
    "rsi",
    "macd",
    "compute_indicators",
    "IndicatorCalculator",
]
