import logging

from aiogram import Bot
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError

from taskwatch.errors import DeliveryError
from taskwatch.notify.base import truncate

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4096


class TelegramNotifier:
    def __init__(self, token: str, chat_id: int | str, timeout: float = 10.0):
        self.chat_id = chat_id
        self.timeout = timeout
        self.bot = Bot(
            token=token,
            default=DefaultBotProperties(parse_mode=ParseMode.MARKDOWN),
        )

    async def send(self, message: str) -> None:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=truncate(message, MAX_MESSAGE_LENGTH),
                request_timeout=int(self.timeout),
            )
        except TelegramAPIError as e:
            raise DeliveryError(f"Telegram rejected message: {e}") from e
        logger.debug(f"Telegram message sent to {self.chat_id}")

    async def close(self) -> None:
        await self.bot.session.close()
