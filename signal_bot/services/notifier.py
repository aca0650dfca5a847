"""Signal alert formatting and delivery."""

import logging

from signal_bot.clients import TelegramClient
from signal_engine.models import Signal

logger = logging.getLogger(__name__)


def format_signal_alert(signal: Signal, exchange: str = "Binance") -> str:
    """Render a signal as an HTML Telegram message."""
    if signal.is_buy:
        header, arrow = "🟢 BUY", "⬆️"
    else:
        header, arrow = "🔴 SELL", "⬇️"

    if signal.simulated:
        header += " (SIMULATED DATA)"

    lines = [
        header,
        "",
        f"📊 <b>Pair:</b> {signal.symbol} ({signal.timeframe})",
        f"💰 <b>Price:</b> ${signal.price:.5f} {arrow}",
        f"📈 <b>RSI:</b> {signal.rsi:.1f}",
        f"📉 <b>MACD:</b> {signal.macd:.6f}",
        f"📊 <b>Signal:</b> {signal.macd_signal:.6f}",
    ]
    if signal.confirmations is not None:
        lines.append(f"✅ <b>Confirmations:</b> {signal.confirmations}")
    lines += [
        f"⏰ <b>Time:</b> {signal.emitted_at.strftime('%d/%m/%Y %H:%M:%S %Z').strip()}",
        f"🔄 <b>Exchange:</b> {exchange}",
    ]
    return "\n".join(lines)


class TelegramNotifier:
    """Deliver signals to a Telegram chat.

    Usable directly as a SignalMonitor callback.
    """

    def __init__(self, client: TelegramClient, enabled: bool = True):
        self.client = client
        self.enabled = enabled

    async def notify(self, signal: Signal) -> bool:
        if not self.enabled:
            return False

        sent = await self.client.send_message(format_signal_alert(signal))
        if sent:
            logger.info(f"Telegram alert sent for {signal.type.value} signal {signal.id}")
        else:
            logger.warning(f"Telegram alert NOT sent for signal {signal.id}")
        return sent

    async def __call__(self, signal: Signal) -> None:
        await self.notify(signal)
