"""
Telegram delivery channel.

Sends the formatted inquiry to the administrator chat and replies to the
person who opened the deep link.
"""

from typing import Optional, Protocol

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, LinkPreviewOptions
from telegram.constants import ParseMode
from telegram.error import TelegramError

from handoff.errors import DeliveryError
from handoff.logging_config import logger


class DeliveryChannel(Protocol):
    async def notify_admin(self, chat_id: int, text: str) -> None: ...

    async def reply_to_submitter(self, chat_id: int, text: str, link: Optional[tuple[str, str]] = None) -> None: ...


class TelegramDelivery:
    """DeliveryChannel backed by a python-telegram-bot Bot."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def notify_admin(self, chat_id: int, text: str) -> None:
        """
        Send a MarkdownV2 notification to the admin chat.

        Raises:
            DeliveryError: Telegram rejected the message or was unreachable
        """
        try:
            await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                parse_mode=ParseMode.MARKDOWN_V2,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
            )
        except TelegramError as e:
            raise DeliveryError(f"Send to admin chat {chat_id} failed: {e}") from e

        logger.info(f"Inquiry delivered to admin chat {chat_id}")

    async def reply_to_submitter(self, chat_id: int, text: str, link: Optional[tuple[str, str]] = None) -> None:
        """
        Send a plain text reply, optionally with a single URL button.

        Args:
            chat_id: Telegram chat ID of the submitter
            text: Message text
            link: Optional (button text, url) pair
        """
        reply_markup = None
        if link:
            button_text, url = link
            reply_markup = InlineKeyboardMarkup([[InlineKeyboardButton(text=button_text, url=url)]])

        await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=reply_markup)
