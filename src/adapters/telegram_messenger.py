"""Telegram messenger adapter — implements MessengerPort.

Wraps a telegram.Bot instance to satisfy the MessengerPort protocol.
"""

from __future__ import annotations

import logging

from telegram import Bot
from telegram.error import TelegramError

from src.core.errors import MessengerError

logger = logging.getLogger(__name__)


class TelegramMessenger:
    """Telegram implementation of MessengerPort."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send_message(self, chat_id: int, text: str) -> None:
        try:
            await self._bot.send_message(chat_id=chat_id, text=text)
        except TelegramError as exc:
            raise MessengerError(f"Failed to send message to chat {chat_id}: {exc}") from exc

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        try:
            await self._bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramError as exc:
            raise MessengerError(
                f"Failed to delete message {message_id} in chat {chat_id}: {exc}"
            ) from exc
        logger.debug("Deleted message %d in chat %d", message_id, chat_id)
