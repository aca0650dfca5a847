"""Tests for alert formatting and Telegram delivery."""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

from signal_bot.services import TelegramNotifier, format_signal_alert
from signal_engine.models import Signal, SignalType


def _make_signal(**overrides) -> Signal:
    fields = dict(
        symbol="XLMUSDT",
        timeframe="5m",
        type=SignalType.BUY,
        price=Decimal("0.115834"),
        rsi=Decimal("42.37"),
        macd=Decimal("0.00012345"),
        macd_signal=Decimal("0.0001"),
        volume=Decimal("125000"),
        emitted_at=datetime(2024, 1, 1, 12, 30, tzinfo=timezone.utc),
        rule="crossover_strict",
    )
    fields.update(overrides)
    return Signal(**fields)


class TestFormatSignalAlert:
    def test_buy_message(self):
        text = format_signal_alert(_make_signal())

        assert text.startswith("🟢 BUY")
        assert "XLMUSDT (5m)" in text
        assert "$0.11583" in text
        assert "<b>RSI:</b> 42.4" in text
        assert "<b>MACD:</b> 0.000123" in text
        assert "<b>Signal:</b> 0.000100" in text
        assert "01/01/2024 12:30:00 UTC" in text
        assert "Binance" in text
        assert "SIMULATED" not in text
        assert "Confirmations" not in text

    def test_sell_message(self):
        text = format_signal_alert(_make_signal(type=SignalType.SELL))
        assert text.startswith("🔴 SELL")

    def test_simulated_is_marked(self):
        text = format_signal_alert(_make_signal(simulated=True))
        assert text.splitlines()[0] == "🟢 BUY (SIMULATED DATA)"

    def test_confirmations_shown(self):
        text = format_signal_alert(
            _make_signal(rule="confirmation_scoring", confirmations=3)
        )
        assert "<b>Confirmations:</b> 3" in text


class TestTelegramNotifier:
    @pytest.mark.asyncio
    async def test_sends_formatted_alert(self):
        client = AsyncMock()
        client.send_message.return_value = True
        notifier = TelegramNotifier(client)
        signal = _make_signal()

        assert await notifier.notify(signal) is True
        client.send_message.assert_awaited_once_with(format_signal_alert(signal))

    @pytest.mark.asyncio
    async def test_disabled(self):
        client = AsyncMock()
        notifier = TelegramNotifier(client, enabled=False)

        assert await notifier.notify(_make_signal()) is False
        client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delivery_failure_reported(self):
        client = AsyncMock()
        client.send_message.return_value = False
        notifier = TelegramNotifier(client)

        assert await notifier.notify(_make_signal()) is False

    @pytest.mark.asyncio
    async def test_usable_as_callback(self):
        client = AsyncMock()
        client.send_message.return_value = True
        notifier = TelegramNotifier(client)

        await notifier(_make_signal())
        client.send_message.assert_awaited_once()
