from typing import Protocol


class Notifier(Protocol):
    """Delivers a text message to the user.

    `send` raises DeliveryError when the message was not accepted.
    """

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...


def truncate(message: str, limit: int) -> str:
    if len(message) <= limit:
        return message
    return message[: limit - 3] + "..."
