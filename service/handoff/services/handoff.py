"""
Handoff protocol: intake and redemption.

Intake (POST /prestart):
1. Validate and normalize the submitted inquiry
2. Store it under a fresh token
3. Build the t.me deep link if the bot username is known

Redemption (/start <token>):
1. No token -> greeting with a link back to the site, store untouched
2. Token unknown or expired -> ask the user to resubmit
3. Otherwise format the inquiry and send it to the admin chat.
   A failed admin send is logged only: the record is already consumed,
   and the submitter still gets a confirmation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from handoff.errors import DeliveryError, InquiryValidationError
from handoff.logging_config import logger
from handoff.schemas import InquiryPayload, ProgramInfo
from handoff.services.formatter import format_inquiry
from handoff.services.payload_store import PayloadStore
from handoff.telegram_bot.delivery import DeliveryChannel
from handoff.telegram_bot.identity import BotIdentity

REQUIRED_FIELDS = ("name", "contact", "date", "guests", "message")

GREETING_TEXT = (
    "Hello! Press \"Book\" on the site and your inquiry will arrive here automatically.\n"
    "Or write your name and dates here and I will answer."
)
GREETING_BUTTON = "Open site"
EXPIRED_TEXT = "⚠️ This link has expired. Please send your inquiry from the site again."
CONFIRMED_TEXT = "Thank you! Your inquiry has been sent. I will contact you shortly ✅"


def _clean(value: Any) -> str:
    return str(value or "").strip()


def _first(body: dict, *keys: str) -> Any:
    for key in keys:
        if body.get(key):
            return body[key]
    return ""


def parse_inquiry(body: Any) -> InquiryPayload:
    """
    Normalize a /prestart body into an InquiryPayload.

    `program` may be a nested object or flat program_id/programId,
    program_title/programTitle, program_url/programUrl fields.

    Raises:
        InquiryValidationError: first required field that is empty after trimming
    """
    if not isinstance(body, dict):
        body = {}

    raw_program = body.get("program")
    if isinstance(raw_program, dict):
        program_fields = raw_program
    else:
        program_fields = {
            "id": _first(body, "program_id", "programId"),
            "title": _first(body, "program_title", "programTitle"),
            "url": _first(body, "program_url", "programUrl"),
        }

    fields = {key: _clean(body.get(key)) for key in REQUIRED_FIELDS}
    for key in REQUIRED_FIELDS:
        if not fields[key]:
            raise InquiryValidationError(key)

    program = ProgramInfo(
        id=_clean(program_fields.get("id")),
        title=_clean(program_fields.get("title")),
        url=_clean(program_fields.get("url")),
    )
    return InquiryPayload(**fields, program=program)


def deep_link(username: str, token: str) -> str:
    return f"https://t.me/{username}?start={token}"


class RedemptionOutcome(str, Enum):
    GREETING = "greeting"
    EXPIRED = "expired"
    DELIVERED = "delivered"
    DELIVERY_FAILED = "delivery_failed"


@dataclass(frozen=True)
class IntakeResult:
    token: str
    url: Optional[str] = None


@dataclass(frozen=True)
class RedemptionResult:
    outcome: RedemptionOutcome
    reply: str
    payload_consumed: bool = False
    admin_notified: bool = False


class HandoffService:
    def __init__(
        self,
        store: PayloadStore,
        delivery: DeliveryChannel,
        identity: BotIdentity,
        admin_chat_id: Optional[int] = None,
        site_url: str = "",
    ):
        self.store = store
        self.delivery = delivery
        self.identity = identity
        self.admin_chat_id = admin_chat_id
        self.site_url = site_url

    async def intake(self, body: Any) -> IntakeResult:
        payload = parse_inquiry(body)
        token = self.store.put(payload)

        username = self.identity.cached
        if not username:
            try:
                username = await self.identity.username()
            except Exception as e:
                logger.error(f"[PRESTART] getMe failed: {e}", exc_info=True)
                username = None

        url = deep_link(username, token) if username else None
        logger.info(f"[PRESTART] token={token} has_url={url is not None}")
        return IntakeResult(token=token, url=url)

    async def redeem(self, start_param: Optional[str], chat_id: int) -> RedemptionResult:
        token = (start_param or "").strip()
        logger.info(f"[START] chat_id={chat_id} token_present={bool(token)}")

        if not token:
            link = (GREETING_BUTTON, self.site_url) if self.site_url else None
            await self.delivery.reply_to_submitter(chat_id, GREETING_TEXT, link=link)
            return RedemptionResult(RedemptionOutcome.GREETING, GREETING_TEXT)

        payload = self.store.take(token)
        if payload is None:
            await self.delivery.reply_to_submitter(chat_id, EXPIRED_TEXT)
            return RedemptionResult(RedemptionOutcome.EXPIRED, EXPIRED_TEXT)

        text = format_inquiry(payload)
        admin_chat_id = self.admin_chat_id or chat_id

        admin_notified = False
        try:
            await self.delivery.notify_admin(admin_chat_id, text)
            admin_notified = True
        except DeliveryError as e:
            logger.error(f"[SEND->ADMIN] failed: {e}", exc_info=True)

        await self.delivery.reply_to_submitter(chat_id, CONFIRMED_TEXT)

        outcome = RedemptionOutcome.DELIVERED if admin_notified else RedemptionOutcome.DELIVERY_FAILED
        return RedemptionResult(
            outcome,
            CONFIRMED_TEXT,
            payload_consumed=True,
            admin_notified=admin_notified,
        )
