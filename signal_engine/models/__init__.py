"""Data models."""

from signal_engine.models.bar import Bar, BarBuffer
from signal_engine.models.config import AnalyzerConfig
from signal_engine.models.signal import Signal, SignalType
from signal_engine.models.snapshot import IndicatorSnapshot
from signal_engine.models.state import EngineState

__all__ = [
    "Bar",
    "BarBuffer",
    "AnalyzerConfig",
    "Signal",
    "SignalType",
    "IndicatorSnapshot",
    "EngineState",
]
