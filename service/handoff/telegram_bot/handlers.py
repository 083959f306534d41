"""
Telegram command handlers.

/start <token> redeems an inquiry stored by POST /prestart; the deep link
t.me/<bot>?start=<token> arrives here with the token in context.args.
/id reports the chat_id, used to configure ADMIN_CHAT_ID.
"""

from telegram import Update
from telegram.ext import ContextTypes

from handoff.logging_config import logger


async def handle_start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command with optional deep link token."""
    # Imported here: bot.py imports this module to register handlers
    from .bot import get_handoff_service

    args = context.args or []  # ['AbC123xyz_-0'] or []
    token = args[0] if args else None

    result = await get_handoff_service().redeem(token, update.effective_chat.id)
    logger.info(f"[START] outcome={result.outcome.value} admin_notified={result.admin_notified}")


async def handle_id_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /id command - report chat_id for admin setup."""
    await update.effective_message.reply_text(f"chat_id: {update.effective_chat.id}")


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in handlers."""
    logger.error(f"Bot error: {context.error}", exc_info=context.error)
