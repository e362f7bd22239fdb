"""Typed outcomes for engine operations.

Expected business conditions (expired coupon, no slots, no credits) come back
as a ``Rejection`` value. Only states that should be impossible raise, as
``InvariantViolation``.
"""
import enum
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class RejectionKind(str, enum.Enum):
    VALIDATION = "ValidationError"
    BUSINESS_RULE = "BusinessRuleViolation"
    CONCURRENCY = "ConcurrencyConflict"
    NOT_FOUND = "NotFound"


class RejectionCode(str, enum.Enum):
    INVALID_TRAVELER_COUNT = "INVALID_TRAVELER_COUNT"
    MISSING_PICKUP = "MISSING_PICKUP"
    MISSING_DROPOFF = "MISSING_DROPOFF"
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    PROMO_NOT_FOUND = "PROMO_NOT_FOUND"
    PROMO_INACTIVE = "PROMO_INACTIVE"
    PROMO_EXPIRED = "PROMO_EXPIRED"
    PROMO_EXHAUSTED = "PROMO_EXHAUSTED"
    DISCOUNT_NOT_ALLOWED = "DISCOUNT_NOT_ALLOWED"
    SPOT_RESERVATION_UNAVAILABLE = "SPOT_RESERVATION_UNAVAILABLE"
    ADVANCE_EXCEEDS_FARE = "ADVANCE_EXCEEDS_FARE"
    BATCH_NOT_BOOKABLE = "BATCH_NOT_BOOKABLE"
    BOOKING_CLOSED = "BOOKING_CLOSED"
    INSUFFICIENT_SLOTS = "INSUFFICIENT_SLOTS"
    INSUFFICIENT_WALLET_BALANCE = "INSUFFICIENT_WALLET_BALANCE"
    FARE_CHANGED = "FARE_CHANGED"
    CANCELLATION_WINDOW_CLOSED = "CANCELLATION_WINDOW_CLOSED"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    NOT_CANCELLABLE = "NOT_CANCELLABLE"
    REFUND_NOT_PENDING = "REFUND_NOT_PENDING"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    PACKAGE_UNAVAILABLE = "PACKAGE_UNAVAILABLE"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class Rejection:
    kind: RejectionKind
    code: RejectionCode
    message: str

    @property
    def retryable(self) -> bool:
        return self.kind == RejectionKind.CONCURRENCY

    def as_dict(self) -> dict:
        return {"kind": self.kind.value, "code": self.code.value, "message": self.message, "retryable": self.retryable}


def invalid(code: RejectionCode, message: str) -> Rejection:
    return Rejection(RejectionKind.VALIDATION, code, message)


def violation(code: RejectionCode, message: str) -> Rejection:
    return Rejection(RejectionKind.BUSINESS_RULE, code, message)


def conflict(code: RejectionCode, message: str) -> Rejection:
    return Rejection(RejectionKind.CONCURRENCY, code, message)


def not_found(message: str) -> Rejection:
    return Rejection(RejectionKind.NOT_FOUND, RejectionCode.NOT_FOUND, message)


class InvariantViolation(RuntimeError):
    """An engine invariant does not hold. Logged, never corrected."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.context = context
        logger.error("invariant violation: %s %s", message, context)


class RejectedError(Exception):
    """Carries a Rejection out of a transaction block so the session can be rolled back."""

    def __init__(self, rejection: Rejection):
        super().__init__(rejection.message)
        self.rejection = rejection
