"""Telegram chat adapter — implements MessageProvider.

Wraps a telegram.Bot instance; the chat handle is the Telegram chat id.
Without a bot (no token configured) every send fails with ConfigurationError.
"""

from __future__ import annotations

import logging

from telegram import Bot
from telegram.error import TelegramError

from familydays.ports.channel_port import ChannelError, ConfigurationError

logger = logging.getLogger(__name__)


class TelegramChatProvider:
    """Telegram implementation of the chat channel."""

    def __init__(self, bot: Bot | None) -> None:
        self._bot = bot
        self._initialized = False

    async def send(self, to: str, body: str) -> str:
        if self._bot is None:
            raise ConfigurationError("Telegram bot token not configured")
        try:
            if not self._initialized:
                await self._bot.initialize()
                self._initialized = True
            message = await self._bot.send_message(chat_id=to, text=body)
        except TelegramError as exc:
            logger.warning("Telegram send to %s failed: %s", to, exc)
            raise ChannelError(f"Telegram send failed: {exc}") from exc
        return str(message.message_id)

    async def close(self) -> None:
        """Shut down the bot's HTTP session if a send opened it."""
        if self._bot is not None and self._initialized:
            await self._bot.shutdown()
            self._initialized = False
