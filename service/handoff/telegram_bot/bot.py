"""
Main Telegram bot handler.

Uses python-telegram-bot; updates arrive either through the FastAPI webhook
endpoint (push) or the Updater's long polling (pull).
"""

from typing import Optional

from telegram import BotCommand, Update
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler

from handoff.config import get_settings
from handoff.logging_config import logger
from handoff.services.handoff import HandoffService
from handoff.services.payload_store import get_payload_store
from .delivery import TelegramDelivery
from .handlers import handle_error, handle_id_command, handle_start_command
from .identity import BotIdentity
from .transport import Transport

BOT_COMMANDS = [
    BotCommand("start", "Start the bot"),
    BotCommand("id", "Show my chat_id"),
]

# Global instances (initialized once)
_application: Optional[Application] = None
_handoff_service: Optional[HandoffService] = None
_transport: Optional[Transport] = None


def get_bot_application() -> Application:
    """Get or create telegram bot application."""
    global _application

    if _application is None:
        settings = get_settings()

        _application = (
            Application.builder()
            .token(settings.bot_token)
            .build()
        )

        _application.add_handler(CommandHandler("start", handle_start_command))
        _application.add_handler(CommandHandler("id", handle_id_command))

        _application.add_error_handler(handle_error)

        logger.info("Telegram bot application initialized")

    return _application


def get_handoff_service() -> HandoffService:
    """Get or create the handoff service wired to the bot and the shared store."""
    global _handoff_service

    if _handoff_service is None:
        settings = get_settings()
        bot = get_bot_application().bot
        _handoff_service = HandoffService(
            store=get_payload_store(),
            delivery=TelegramDelivery(bot),
            identity=BotIdentity(bot.get_me),
            admin_chat_id=settings.admin_chat_id,
            site_url=settings.site_url,
        )

    return _handoff_service


def get_transport() -> Optional[Transport]:
    """Transport started by initialize_bot, None before startup."""
    return _transport


async def handle_telegram_update(update_data: dict) -> None:
    """
    Process incoming webhook update from Telegram.

    This is called by FastAPI webhook endpoint.
    Runs handlers in background (fire-and-forget).
    """
    try:
        app = get_bot_application()

        update = Update.de_json(update_data, app.bot)

        if update:
            await app.process_update(update)
        else:
            logger.warning("Received invalid update data")

    except Exception as e:
        logger.error(f"Failed to process update: {e}", exc_info=True)


async def initialize_bot(transport: Transport) -> None:
    """
    Initialize bot application and start receiving updates (call on startup).

    Raises:
        TransportStartupError: webhook registration or polling failed
    """
    global _transport

    app = get_bot_application()
    await app.initialize()
    await app.start()

    try:
        await app.bot.set_my_commands(BOT_COMMANDS)
    except TelegramError as e:
        logger.error(f"setMyCommands failed: {e}")

    await transport.start(app)
    _transport = transport
    logger.info("Bot initialized successfully")


async def shutdown_bot() -> None:
    """
    Stop receiving updates and shut the application down (call on shutdown).
    """
    global _application, _transport

    if _application:
        if _transport is not None:
            await _transport.stop(_application)
            _transport = None
        if _application.running:
            await _application.stop()
        await _application.shutdown()
        logger.info("Bot shut down")
