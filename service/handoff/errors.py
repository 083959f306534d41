"""
Error types raised by the handoff service.

An unknown or expired token is not an error: PayloadStore.take returns None.
"""


class HandoffError(Exception):
    """Base class for handoff service errors."""


class InquiryValidationError(HandoffError):
    """A required inquiry field is missing or empty after trimming."""

    def __init__(self, missing_field: str):
        self.missing_field = missing_field
        super().__init__(f"Missing {missing_field}")


class DeliveryError(HandoffError):
    """The administrator notification could not be sent."""


class TransportStartupError(HandoffError):
    """The bot could not start receiving updates."""


class EntropyUnavailable(HandoffError):
    """The OS random source cannot produce token bytes."""
