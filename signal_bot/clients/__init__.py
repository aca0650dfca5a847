"""External API clients."""

from signal_bot.clients.binance_rest import BinanceRestClient, RateLimiter
from signal_bot.clients.telegram import TelegramClient

__all__ = [
    "BinanceRestClient",
    "RateLimiter",
    "TelegramClient",
]
