"""LINE Notify delivery.

Posts `message` as form data with the personal access token as a bearer
token. See: https://notify-bot.line.me/doc/en/
"""

import logging

import httpx

from taskwatch.errors import DeliveryError
from taskwatch.notify.base import truncate

logger = logging.getLogger(__name__)

LINE_NOTIFY_URL = "https://notify-api.line.me/api/notify"

# LINE Notify rejects messages longer than this
MAX_MESSAGE_LENGTH = 1000

DEFAULT_TIMEOUT = 10.0


class LineNotifyNotifier:
    def __init__(
        self,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        url: str = LINE_NOTIFY_URL,
    ):
        self.token = token
        self.url = url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.token}"},
            )
        return self._client

    async def send(self, message: str) -> None:
        if not self.is_configured:
            raise DeliveryError("LINE Notify token not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                self.url,
                data={"message": truncate(message, MAX_MESSAGE_LENGTH)},
            )
        except httpx.TimeoutException as e:
            raise DeliveryError("LINE Notify request timed out") from e
        except httpx.RequestError as e:
            raise DeliveryError(f"LINE Notify request error: {e}") from e

        if response.status_code != 200:
            raise DeliveryError(
                f"LINE Notify returned HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        logger.debug("LINE Notify accepted message")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
