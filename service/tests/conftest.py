"""
Shared fixtures.

BOT_TOKEN must exist before handoff.main is imported: settings are read at
import time for the CORS allow-list.
"""

import os

os.environ.setdefault("BOT_TOKEN", "123456:TEST-TOKEN")

from types import SimpleNamespace

import pytest

from handoff.errors import DeliveryError
from handoff.services.handoff import HandoffService
from handoff.services.payload_store import PayloadStore
from handoff.telegram_bot.identity import BotIdentity


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDelivery:
    """Records admin notifications and submitter replies."""

    def __init__(self, fail_admin: bool = False):
        self.fail_admin = fail_admin
        self.admin_messages: list[tuple[int, str]] = []
        self.replies: list[tuple[int, str, object]] = []

    async def notify_admin(self, chat_id: int, text: str) -> None:
        if self.fail_admin:
            raise DeliveryError("Telegram unreachable")
        self.admin_messages.append((chat_id, text))

    async def reply_to_submitter(self, chat_id: int, text: str, link=None) -> None:
        self.replies.append((chat_id, text, link))


def make_identity(username: str = "test_bot") -> BotIdentity:
    async def get_me():
        return SimpleNamespace(username=username)

    return BotIdentity(get_me)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return PayloadStore(ttl_seconds=30 * 60, clock=clock)


@pytest.fixture
def delivery():
    return FakeDelivery()


@pytest.fixture
def service(store, delivery):
    return HandoffService(
        store=store,
        delivery=delivery,
        identity=make_identity(),
        admin_chat_id=777,
        site_url="https://example.github.io/site/",
    )


@pytest.fixture
def valid_body():
    return {
        "name": "A",
        "contact": "b@x.com",
        "date": "2025-01-01",
        "guests": "2",
        "message": "hi",
    }
