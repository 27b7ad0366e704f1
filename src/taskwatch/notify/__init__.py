"""Delivery channels for Task Watch messages."""

from taskwatch.config import Settings, settings
from taskwatch.notify.base import Notifier
from taskwatch.notify.line import LineNotifyNotifier
from taskwatch.notify.webhook import WebhookNotifier


def create_notifier(config: Settings | None = None) -> Notifier:
    """Build the notifier selected by the NOTIFIER setting.

    Raises:
        ValueError: if the selected channel is missing its credentials
    """
    config = config or settings

    if not config.has_notifier:
        raise ValueError(f"Notifier {config.notifier!r} is not configured")

    if config.notifier == "telegram":
        # aiogram is only imported when Telegram is the chosen channel
        from taskwatch.notify.telegram import TelegramNotifier

        return TelegramNotifier(
            token=config.telegram_bot_token,
            chat_id=config.telegram_chat_id,
            timeout=config.http_timeout_seconds,
        )

    if config.notifier == "webhook":
        return WebhookNotifier(config.webhook_url, timeout=config.http_timeout_seconds)

    return LineNotifyNotifier(config.line_notify_token, timeout=config.http_timeout_seconds)


__all__ = [
    "Notifier",
    "LineNotifyNotifier",
    "WebhookNotifier",
    "create_notifier",
]
