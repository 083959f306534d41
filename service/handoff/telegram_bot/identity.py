from __future__ import annotations

"""
Lazy bot identity lookup.

The deep link needs the bot username, which is only known after a getMe
call. Concurrent intake requests share one lookup and its cached result.
"""

import asyncio
from typing import Any, Awaitable, Callable

from handoff.logging_config import logger


class BotIdentity:
    def __init__(self, fetch_me: Callable[[], Awaitable[Any]]):
        self._fetch_me = fetch_me
        self._username: str | None = None
        self._lock = asyncio.Lock()

    @property
    def cached(self) -> str | None:
        return self._username

    async def username(self) -> str:
        """Return the bot username, calling getMe at most once on success."""
        if self._username is not None:
            return self._username

        async with self._lock:
            if self._username is None:
                me = await self._fetch_me()
                self._username = getattr(me, "username", None) or ""
                logger.info(f"Bot username resolved: @{self._username}")

        return self._username
