"""Business services."""

from signal_bot.services.bar_source import (
    BarBatch,
    BarSource,
    ExchangeBarSource,
    FallbackBarSource,
    SyntheticBarSource,
    TIMEFRAME_TO_MINUTES,
    timeframe_delta,
)
from signal_bot.services.notifier import TelegramNotifier, format_signal_alert
from signal_bot.services.signal_monitor import (
    MonitorStatus,
    SignalMonitor,
    format_uptime,
)

__all__ = [
    "BarBatch",
    "BarSource",
    "ExchangeBarSource",
    "FallbackBarSource",
    "SyntheticBarSource",
    "TIMEFRAME_TO_MINUTES",
    "timeframe_delta",
    "TelegramNotifier",
    "format_signal_alert",
    "MonitorStatus",
    "SignalMonitor",
    "format_uptime",
]
