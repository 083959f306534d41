"""
Telegram Bot module for the handoff service.

ARCHITECTURE: Thin transport layer - business logic lives in handoff.services.
- Receives updates via webhook (push) or long polling (pull)
- /start <token> -> HandoffService.redeem
- Delivers the formatted inquiry to the admin chat

Submodules are imported directly (handoff.telegram_bot.bot, ...);
handoff.services.handoff depends on delivery and identity from here.
"""
