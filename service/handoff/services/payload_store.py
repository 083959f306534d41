"""
In-memory handoff store.

Maps token -> (inquiry, expiry). Records are single use: take() removes the
record before checking its expiry, so a token never succeeds twice.
Nothing survives a restart.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from handoff.config import get_settings
from handoff.logging_config import logger
from handoff.schemas import InquiryPayload
from handoff.services.tokens import generate_token


@dataclass(frozen=True)
class HandoffRecord:
    token: str
    payload: InquiryPayload
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class PayloadStore:
    """Token-keyed store with TTL; put/take/sweep are the only mutation points."""

    def __init__(
        self,
        ttl_seconds: float = 30 * 60,
        clock: Callable[[], float] = time.time,
        token_factory: Callable[[], str] = generate_token,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._token_factory = token_factory
        self._records: dict[str, HandoffRecord] = {}
        self._lock = threading.Lock()

    def put(self, payload: InquiryPayload) -> str:
        """Store payload under a new token and return the token."""
        expires_at = self._clock() + self.ttl_seconds

        while True:
            token = self._token_factory()
            with self._lock:
                if token not in self._records:
                    self._records[token] = HandoffRecord(token, payload, expires_at)
                    return token
            logger.warning("Token collision, regenerating")

    def take(self, token: str) -> Optional[InquiryPayload]:
        """
        Remove the record for token and return its payload.

        Returns None for unknown, already taken, or expired tokens.
        """
        with self._lock:
            record = self._records.pop(token, None)

        if record is None:
            logger.info(f"Token not found: {token}")
            return None

        if record.is_expired(self._clock()):
            logger.info(f"Token expired: {token}")
            return None

        return record.payload

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop every expired record. Returns the number removed."""
        if now is None:
            now = self._clock()

        with self._lock:
            expired = [token for token, record in self._records.items() if record.is_expired(now)]
            for token in expired:
                del self._records[token]

        if expired:
            logger.debug(f"Swept {len(expired)} expired tokens")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._records


class PayloadSweeper:
    """Runs PayloadStore.sweep on a fixed interval in an asyncio task."""

    def __init__(self, store: PayloadStore, interval_seconds: float = 60):
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Sweeper started, interval={self.interval_seconds}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.store.sweep()
            except Exception as e:
                logger.error(f"Sweep failed: {e}", exc_info=True)


@lru_cache()
def get_payload_store() -> PayloadStore:
    """Process-wide store built from settings."""
    settings = get_settings()
    return PayloadStore(ttl_seconds=settings.payload_ttl_seconds)
