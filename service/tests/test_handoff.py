"""
Tests for the handoff protocol: inquiry parsing, intake, redemption.
"""

import asyncio

import pytest

from conftest import FakeDelivery, make_identity
from handoff.errors import InquiryValidationError
from handoff.services.handoff import (
    CONFIRMED_TEXT,
    EXPIRED_TEXT,
    GREETING_TEXT,
    HandoffService,
    RedemptionOutcome,
    parse_inquiry,
)
from handoff.telegram_bot.identity import BotIdentity


class TestParseInquiry:

    def test_values_are_trimmed(self, valid_body):
        body = {**valid_body, "name": "  Anna  ", "guests": 3}
        payload = parse_inquiry(body)
        assert payload.name == "Anna"
        assert payload.guests == "3"

    @pytest.mark.parametrize("field", ["name", "contact", "date", "guests", "message"])
    def test_each_required_field(self, valid_body, field):
        body = {**valid_body, field: "   "}
        with pytest.raises(InquiryValidationError) as exc:
            parse_inquiry(body)
        assert exc.value.missing_field == field
        assert str(exc.value) == f"Missing {field}"

    def test_first_missing_field_reported(self):
        with pytest.raises(InquiryValidationError) as exc:
            parse_inquiry({"name": "A"})
        assert str(exc.value) == "Missing contact"

    def test_non_object_body(self):
        with pytest.raises(InquiryValidationError) as exc:
            parse_inquiry(["name", "A"])
        assert exc.value.missing_field == "name"

    def test_program_is_optional(self, valid_body):
        payload = parse_inquiry(valid_body)
        assert payload.program.is_empty

    def test_nested_program(self, valid_body):
        body = {**valid_body, "program": {"id": " p1 ", "title": "Tour", "extra": "x"}}
        program = parse_inquiry(body).program
        assert (program.id, program.title, program.url) == ("p1", "Tour", "")

    def test_flat_program_fields(self, valid_body):
        body = {**valid_body, "program_id": "p1", "programTitle": "Tour", "program_url": "https://s/p1"}
        program = parse_inquiry(body).program
        assert (program.id, program.title, program.url) == ("p1", "Tour", "https://s/p1")

    def test_payload_is_immutable(self, valid_body):
        payload = parse_inquiry(valid_body)
        with pytest.raises(Exception):
            payload.name = "Other"


class TestIntake:

    def test_intake_returns_token_and_deep_link(self, service, store, valid_body):
        result = asyncio.run(service.intake(valid_body))
        assert len(result.token) == 12
        assert result.url == f"https://t.me/test_bot?start={result.token}"
        assert result.token in store

    def test_validation_error_leaves_store_untouched(self, service, store):
        with pytest.raises(InquiryValidationError):
            asyncio.run(service.intake({"name": "A"}))
        assert len(store) == 0

    def test_identity_failure_gives_no_url(self, store, delivery, valid_body):
        async def get_me():
            raise RuntimeError("getMe timed out")

        service = HandoffService(store, delivery, BotIdentity(get_me))
        result = asyncio.run(service.intake(valid_body))
        assert result.url is None
        assert result.token in store


class TestRedeem:

    def test_no_token_greets_with_site_link(self, service, store, delivery):
        result = asyncio.run(service.redeem(None, chat_id=42))
        assert result.outcome == RedemptionOutcome.GREETING
        assert not result.payload_consumed
        assert delivery.replies == [(42, GREETING_TEXT, ("Open site", "https://example.github.io/site/"))]
        assert delivery.admin_messages == []

    def test_blank_token_is_treated_as_missing(self, service):
        result = asyncio.run(service.redeem("   ", chat_id=42))
        assert result.outcome == RedemptionOutcome.GREETING

    def test_valid_token_delivers_to_admin(self, service, delivery, valid_body):
        async def scenario():
            intake = await service.intake(valid_body)
            return await service.redeem(intake.token, chat_id=42)

        result = asyncio.run(scenario())

        assert result.outcome == RedemptionOutcome.DELIVERED
        assert result.payload_consumed and result.admin_notified
        [(admin_chat, text)] = delivery.admin_messages
        assert admin_chat == 777
        assert "*Name:* A" in text
        assert "b@x\\.com" in text
        assert delivery.replies == [(42, CONFIRMED_TEXT, None)]

    def test_admin_falls_back_to_invoking_chat(self, store, delivery, valid_body):
        service = HandoffService(store, delivery, make_identity(), admin_chat_id=None)
        token = store.put(parse_inquiry(valid_body))
        asyncio.run(service.redeem(token, chat_id=42))
        assert delivery.admin_messages[0][0] == 42

    def test_delivery_failure_still_confirms(self, store, valid_body):
        delivery = FakeDelivery(fail_admin=True)
        service = HandoffService(store, delivery, make_identity(), admin_chat_id=777)
        token = store.put(parse_inquiry(valid_body))

        result = asyncio.run(service.redeem(token, chat_id=42))

        assert result.outcome == RedemptionOutcome.DELIVERY_FAILED
        assert result.payload_consumed
        assert not result.admin_notified
        assert delivery.replies == [(42, CONFIRMED_TEXT, None)]
        assert token not in store

    def test_expired_token(self, service, store, clock, delivery, valid_body):
        token = store.put(parse_inquiry(valid_body))
        clock.advance(31 * 60)

        result = asyncio.run(service.redeem(token, chat_id=42))

        assert result.outcome == RedemptionOutcome.EXPIRED
        assert delivery.admin_messages == []
        assert delivery.replies == [(42, EXPIRED_TEXT, None)]

    def test_token_redeems_once(self, service, store, delivery, valid_body):
        token = store.put(parse_inquiry(valid_body))

        async def scenario():
            first = await service.redeem(token, chat_id=42)
            second = await service.redeem(token, chat_id=42)
            return first, second

        first, second = asyncio.run(scenario())
        assert first.outcome == RedemptionOutcome.DELIVERED
        assert second.outcome == RedemptionOutcome.EXPIRED
        assert len(delivery.admin_messages) == 1
