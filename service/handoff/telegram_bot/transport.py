"""
How the bot receives updates: push (webhook) or pull (long polling).

Chosen once at startup from settings; switching requires a restart.
"""

import secrets
from dataclasses import dataclass, field
from typing import Optional, Union

from telegram.error import TelegramError
from telegram.ext import Application

from handoff.config import Settings
from handoff.errors import TransportStartupError
from handoff.logging_config import logger

WEBHOOK_PREFIX = "/telegram/webhook"


@dataclass(frozen=True)
class PushTransport:
    """Telegram POSTs updates to <public_url>/telegram/webhook/<hook_id>."""

    public_url: str
    secret: str = ""
    hook_id: str = field(default_factory=lambda: secrets.token_hex(8))

    @property
    def webhook_path(self) -> str:
        return f"{WEBHOOK_PREFIX}/{self.hook_id}"

    @property
    def webhook_url(self) -> str:
        return f"{self.public_url}{self.webhook_path}"

    def accepts(self, hook_id: str, secret_header: Optional[str]) -> bool:
        if not secrets.compare_digest(hook_id, self.hook_id):
            return False
        if self.secret:
            return secret_header is not None and secrets.compare_digest(secret_header, self.secret)
        return True

    async def start(self, application: Application) -> None:
        try:
            await application.bot.set_webhook(
                url=self.webhook_url,
                secret_token=self.secret or None,
            )
        except TelegramError as e:
            raise TransportStartupError(f"setWebhook failed: {e}") from e
        logger.info(f"Webhook set: {self.public_url}{WEBHOOK_PREFIX}/...")

    async def stop(self, application: Application) -> None:
        logger.info("Webhook transport stopped")


@dataclass(frozen=True)
class PullTransport:
    """Bot long-polls getUpdates through the application's Updater."""

    async def start(self, application: Application) -> None:
        if application.updater is None:
            raise TransportStartupError("Application was built without an updater")
        try:
            await application.updater.start_polling()
        except TelegramError as e:
            raise TransportStartupError(f"Polling start failed: {e}") from e
        logger.info("Bot started (polling)")

    async def stop(self, application: Application) -> None:
        if application.updater is not None and application.updater.running:
            await application.updater.stop()
        logger.info("Polling stopped")


Transport = Union[PushTransport, PullTransport]


def select_transport(settings: Settings) -> Transport:
    """
    Resolve the transport from settings.

    Raises:
        TransportStartupError: webhook mode without WEBHOOK_URL
    """
    if settings.use_webhook:
        if not settings.webhook_url:
            raise TransportStartupError("WEBHOOK_URL required when USE_WEBHOOK=1")
        return PushTransport(
            public_url=settings.webhook_url.rstrip("/"),
            secret=settings.webhook_secret,
        )
    return PullTransport()
