"""Tests for engine data models."""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pydantic import ValidationError

from signal_engine.models import (
    AnalyzerConfig,
    Bar,
    BarBuffer,
    EngineState,
    Signal,
    SignalType,
)


T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _make_bar(minute: int = 0, close: str = "0.1") -> Bar:
    c = Decimal(close)
    return Bar(
        symbol="XLMUSDT",
        timeframe="5m",
        timestamp=T0 + timedelta(minutes=minute),
        open=c - Decimal("0.001"),
        high=c + Decimal("0.002"),
        low=c - Decimal("0.002"),
        close=c,
        volume=Decimal("1000"),
    )


def _make_signal(**overrides) -> Signal:
    fields = dict(
        symbol="XLMUSDT",
        timeframe="5m",
        type=SignalType.BUY,
        price=Decimal("0.1"),
        rsi=Decimal("45"),
        macd=Decimal("0.001"),
        macd_signal=Decimal("0.0005"),
        volume=Decimal("1000"),
        emitted_at=T0,
        rule="crossover_strict",
    )
    fields.update(overrides)
    return Signal(**fields)


class TestAnalyzerConfig:
    def test_defaults(self):
        config = AnalyzerConfig()
        assert config.macd_fast == 8
        assert config.macd_slow == 17
        assert config.macd_signal_period == 9
        assert config.rsi_period == 14
        assert config.rsi_lower == 20
        assert config.rsi_upper == 80
        assert config.volume_period == 20
        assert config.alert_cooldown_minutes == 5

    def test_cooldown_and_min_history(self):
        config = AnalyzerConfig(alert_cooldown_minutes=15, macd_slow=26, rsi_period=14)
        assert config.cooldown == timedelta(minutes=15)
        assert config.min_history == 27

    def test_rsi_band_must_be_ordered(self):
        with pytest.raises(ValueError, match="rsi band"):
            AnalyzerConfig(rsi_lower=80, rsi_upper=80)

    def test_rsi_band_within_range(self):
        with pytest.raises(ValueError, match="rsi band"):
            AnalyzerConfig(rsi_lower=-5)

    @pytest.mark.parametrize("field", ["macd_fast", "macd_slow", "rsi_period", "volume_period"])
    def test_periods_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            AnalyzerConfig(**{field: 0})

    def test_fast_must_be_below_slow(self):
        with pytest.raises(ValueError, match="macd_fast"):
            AnalyzerConfig(macd_fast=26, macd_slow=12)

    def test_frozen(self):
        config = AnalyzerConfig()
        with pytest.raises(ValidationError):
            config.rsi_lower = 10


class TestBarBuffer:
    def test_add_in_order(self):
        buffer = BarBuffer(symbol="XLMUSDT", timeframe="5m")
        buffer.add(_make_bar(0))
        buffer.add(_make_bar(5))
        assert len(buffer) == 2

    def test_same_timestamp_replaces_last(self):
        buffer = BarBuffer(symbol="XLMUSDT", timeframe="5m")
        buffer.add(_make_bar(0, close="0.1"))
        buffer.add(_make_bar(0, close="0.2"))

        assert len(buffer) == 1
        assert buffer.get_closes() == [Decimal("0.2")]

    def test_older_bar_ignored(self):
        buffer = BarBuffer(symbol="XLMUSDT", timeframe="5m")
        buffer.add(_make_bar(10))
        buffer.add(_make_bar(5))
        assert len(buffer) == 1

    def test_max_size(self):
        buffer = BarBuffer(symbol="XLMUSDT", timeframe="5m", max_size=3)
        for i in range(5):
            buffer.add(_make_bar(i * 5, close=str(i + 1)))

        assert len(buffer) == 3
        assert buffer.get_closes() == [Decimal("3"), Decimal("4"), Decimal("5")]

    def test_extend_overlapping_batches(self):
        buffer = BarBuffer(symbol="XLMUSDT", timeframe="5m")
        buffer.extend([_make_bar(i * 5) for i in range(4)])
        buffer.extend([_make_bar(i * 5) for i in range(2, 6)])

        assert len(buffer) == 6
        assert buffer.get_volumes() == [Decimal("1000")] * 6


class TestBar:
    def test_direction(self):
        bar = _make_bar()
        assert bar.is_bullish
        assert not bar.is_bearish

    def test_frozen(self):
        bar = _make_bar()
        with pytest.raises(ValidationError):
            bar.close = Decimal("1")


class TestSignal:
    def test_id_generated(self):
        signal = _make_signal()
        assert len(signal.id) == 32
        assert signal.is_buy

    def test_id_depends_on_type(self):
        assert _make_signal().id != _make_signal(type=SignalType.SELL).id

    def test_explicit_id_kept(self):
        assert _make_signal(id="abc").id == "abc"

    def test_frozen(self):
        signal = _make_signal()
        with pytest.raises(ValidationError):
            signal.price = Decimal("1")


class TestEngineState:
    def test_is_guarded(self):
        state = EngineState(startup_guard_until=T0)
        assert state.is_guarded(T0 - timedelta(seconds=1))
        assert not state.is_guarded(T0)
        assert not EngineState().is_guarded(T0)
