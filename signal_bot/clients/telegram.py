"""Telegram Bot API client for alert delivery."""

import logging

import httpx

logger = logging.getLogger(__name__)


class TelegramClient:
    """Minimal Telegram Bot API client (sendMessage, getMe).

    Delivery failures are logged and reported as ``False``; they never
    propagate into the monitor loop.
    """

    BASE_URL = "https://api.telegram.org"

    def __init__(
        self,
        token: str = "",
        chat_id: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.chat_id = chat_id
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.token and self.chat_id)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=10.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send_message(self, text: str, parse_mode: str = "HTML") -> bool:
        """Send a message to the configured chat.

        Returns:
            True if Telegram accepted the message
        """
        if not self.is_configured:
            logger.warning("Telegram credentials not configured")
            return False

        client = await self._get_client()
        try:
            response = await client.post(
                f"/bot{self.token}/sendMessage",
                json={"chat_id": self.chat_id, "text": text, "parse_mode": parse_mode},
            )
            response.raise_for_status()
            return bool(response.json().get("ok", False))
        except httpx.HTTPError as e:
            logger.error(f"Error sending Telegram message: {e}")
            return False

    async def test_connection(self) -> bool:
        """Check the bot token with getMe.

        Returns:
            True if Telegram recognised the token
        """
        if not self.token:
            return False

        client = await self._get_client()
        try:
            response = await client.get(f"/bot{self.token}/getMe")
            response.raise_for_status()
            return bool(response.json().get("ok", False))
        except httpx.HTTPError as e:
            logger.error(f"Error testing Telegram connection: {e}")
            return False
