"""Exceptions raised by the Boarding Mess service layer.

API endpoints translate these into HTTP responses; background workers log them.
"""

from __future__ import annotations

from datetime import date


class MessError(RuntimeError):
    """Base exception for all service-level failures."""


class CutoffExceeded(MessError):
    """Raised when a member writes a registration after its cutoff."""

    def __init__(self, period: str, meal_date: date, cutoff_label: str) -> None:
        self.period = period
        self.meal_date = meal_date
        self.cutoff_label = cutoff_label
        super().__init__(f"Cannot modify {period} meal after {cutoff_label}")


class InvalidQuantity(MessError, ValueError):
    """Raised when a quantity falls outside its allowed range."""

    def __init__(self, quantity: int, minimum: int, maximum: int) -> None:
        self.quantity = quantity
        super().__init__(f"Quantity {quantity} must be between {minimum} and {maximum}")


class DuplicateRegistration(MessError):
    """Raised when a plain insert collides with an existing registration.

    Writes go through upsert or skip-on-conflict, so callers should never see this.
    """


class NotificationDeliveryFailure(MessError):
    """Raised internally when a violation message cannot be appended."""


class ClockSyncFailure(MessError):
    """Raised internally when the server time cannot be fetched."""


class PermissionDenied(MessError):
    """Raised when the acting member may not perform an operation."""


class MemberNotFound(MessError, LookupError):
    """Raised when a referenced member does not exist."""

    def __init__(self, member_id: int) -> None:
        self.member_id = member_id
        super().__init__(f"Member {member_id} not found")


class BackfillRangeError(MessError, ValueError):
    """Raised when a backfill range is inverted or exceeds the configured bound."""


class EggsUnavailable(MessError):
    """Raised when an egg consumption exceeds what the period's inventory allows."""

    def __init__(self, requested: int, available: int, start: date, end: date) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot take {requested} eggs: only {available} available "
            f"in period {start.isoformat()} to {end.isoformat()}"
        )
