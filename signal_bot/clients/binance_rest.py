"""Binance REST API client for fetching recent bars."""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import httpx

from signal_engine.models import Bar

MAX_KLINES_PER_REQUEST = 1000


class RateLimiter:
    """Simple rate limiter for API calls."""

    def __init__(self, calls_per_minute: int = 1200):
        self.calls_per_minute = calls_per_minute
        self.interval = 60.0 / calls_per_minute
        self.last_call = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        """Wait if necessary to respect rate limit."""
        async with self._lock:
            loop = asyncio.get_running_loop()
            wait_time = self.last_call + self.interval - loop.time()
            if wait_time > 0:
                await asyncio.sleep(wait_time)
            self.last_call = loop.time()


class BinanceRestClient:
    """Binance spot REST API client (public market data only)."""

    def __init__(
        self,
        base_url: str = "https://api.binance.com",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.rate_limiter = RateLimiter()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self, method: str, endpoint: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Make an API request with rate limiting."""
        await self.rate_limiter.acquire()
        client = await self._get_client()
        response = await client.request(method, endpoint, params=params)
        response.raise_for_status()
        return response.json()

    async def get_klines(
        self,
        symbol: str,
        interval: str,
        limit: int = 100,
        end_time: datetime | None = None,
    ) -> list[Bar]:
        """
        Fetch the most recent bars from Binance.

        Args:
            symbol: Trading pair (e.g., "XLMUSDT")
            interval: Bar interval (e.g., "5m", "1h")
            limit: Maximum number of bars (max 1000)
            end_time: Last bar open time (inclusive), defaults to now

        Returns:
            List of Bar objects, oldest first
        """
        params: dict[str, Any] = {
            "symbol": symbol,
            "interval": interval,
            "limit": min(limit, MAX_KLINES_PER_REQUEST),
        }
        if end_time:
            params["endTime"] = int(end_time.timestamp() * 1000)

        data = await self._request("GET", "/api/v3/klines", params)

        bars = []
        for item in data:
            bars.append(
                Bar(
                    symbol=symbol,
                    timeframe=interval,
                    timestamp=datetime.fromtimestamp(item[0] / 1000, tz=timezone.utc),
                    open=Decimal(str(item[1])),
                    high=Decimal(str(item[2])),
                    low=Decimal(str(item[3])),
                    close=Decimal(str(item[4])),
                    volume=Decimal(str(item[5])),
                )
            )

        return bars

    async def get_server_time(self) -> datetime:
        """Get Binance server time."""
        data = await self._request("GET", "/api/v3/time")
        return datetime.fromtimestamp(data["serverTime"] / 1000, tz=timezone.utc)
