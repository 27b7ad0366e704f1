"""Generic JSON webhook delivery (Slack-compatible `{"text": ...}` payload)."""

import logging

import httpx

from taskwatch.errors import DeliveryError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class WebhookNotifier:
    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT):
        self.url = url
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    async def send(self, message: str) -> None:
        if not self.is_configured:
            raise DeliveryError("Webhook URL not configured")

        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)

        try:
            response = await self._client.post(self.url, json={"text": message})
        except httpx.TimeoutException as e:
            raise DeliveryError("Webhook request timed out") from e
        except httpx.RequestError as e:
            raise DeliveryError(f"Webhook request error: {e}") from e

        if not response.is_success:
            raise DeliveryError(
                f"Webhook returned HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        logger.debug("Webhook accepted message")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
