"""Fare computation for a prospective booking.

Pure and synchronous: everything it needs is passed in. Terms are carried as
exact ``Decimal`` values and only the payable total is rounded.
"""
from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal

from travonex.core.clock import utcnow
from travonex.services.errors import InvariantViolation, Rejection, RejectionCode, invalid, violation
from travonex.services.money import floor_unit, percent_of, to_decimal, to_unit
from travonex.services.promo_service import FIXED, PERCENTAGE, check_promo


@dataclass(frozen=True)
class FareBreakdown:
    base_price: int
    traveler_count: int
    subtotal: int
    coupon_code: str | None
    coupon_discount: int
    wallet_discount: int
    tax_percentage: int
    tax: int
    total_payable: int
    is_partial: bool
    final_payable: int
    advance_amount: int | None = None
    remaining_amount: int | None = None

    def as_dict(self) -> dict:
        return asdict(self)


def resolve_base_price(trip_price: int, price_override: int | None) -> int:
    """A batch price override always wins over the trip price."""
    return price_override if price_override is not None else trip_price


def _coupon_discount(promo, subtotal: Decimal) -> Decimal:
    if promo is None:
        return Decimal(0)
    if promo.kind == FIXED:
        discount = to_decimal(promo.value)
    elif promo.kind == PERCENTAGE:
        discount = percent_of(subtotal, promo.value)
    else:
        raise InvariantViolation("unknown promo kind", promo_kind=promo.kind)
    return min(max(discount, Decimal(0)), subtotal)


def compute_fare(
    base_price_per_person: int,
    traveler_count: int,
    promo=None,
    wallet_balance: int = 0,
    use_wallet: bool = False,
    tax_included: bool = True,
    tax_percentage: int = 0,
    is_partial: bool = False,
    advance_amount: int | None = None,
    now: datetime | None = None,
) -> FareBreakdown | Rejection:
    if traveler_count < 1:
        return invalid(RejectionCode.INVALID_TRAVELER_COUNT, "At least one traveler is required.")
    if base_price_per_person < 0 or wallet_balance < 0 or (tax_percentage or 0) < 0:
        raise InvariantViolation(
            "negative fare input",
            base_price=base_price_per_person, wallet_balance=wallet_balance, tax_percentage=tax_percentage,
        )

    if is_partial:
        # Spot reservations bypass discounting entirely
        if promo is not None or use_wallet:
            return violation(
                RejectionCode.DISCOUNT_NOT_ALLOWED,
                "Coupons and wallet credit cannot be used for spot reservations.",
            )
        if advance_amount is None or advance_amount <= 0:
            return violation(
                RejectionCode.SPOT_RESERVATION_UNAVAILABLE,
                "Spot reservation is not available for this trip.",
            )

    if promo is not None:
        rejection = check_promo(promo, now or utcnow())
        if rejection:
            return rejection

    subtotal = to_decimal(base_price_per_person) * traveler_count
    coupon = _coupon_discount(promo, subtotal)
    # Wallet debits are whole units
    wallet = Decimal(min(floor_unit(wallet_balance), floor_unit(subtotal - coupon))) if use_wallet else Decimal(0)
    # Tax is on the post-coupon amount; wallet credit is a payment method, not a price reduction
    taxable = subtotal - coupon
    tax = Decimal(0) if tax_included else percent_of(taxable, tax_percentage or 0)

    # The only rounding step: the exact payable, once
    total = to_unit(subtotal - coupon - wallet + tax)
    subtotal_u = int(subtotal)
    wallet_u = int(wallet)
    # One line absorbs the rounding so the reported lines add up to the total
    if tax == 0:
        tax_u = 0
        coupon_u = subtotal_u - wallet_u - total
    else:
        coupon_u = to_unit(coupon)
        tax_u = total - subtotal_u + coupon_u + wallet_u
    if total < 0 or tax_u < 0 or not 0 <= coupon_u <= subtotal_u:
        raise InvariantViolation(
            "fare lines do not reconcile", total=total, coupon=coupon_u, wallet=wallet_u, tax=tax_u,
        )

    common = dict(
        base_price=int(base_price_per_person),
        traveler_count=traveler_count,
        subtotal=subtotal_u,
        coupon_code=promo.code if promo is not None else None,
        coupon_discount=coupon_u,
        wallet_discount=wallet_u,
        tax_percentage=0 if tax_included else int(tax_percentage or 0),
        tax=tax_u,
        total_payable=total,
        is_partial=is_partial,
    )
    if not is_partial:
        return FareBreakdown(final_payable=total, **common)

    remaining = total - int(advance_amount)
    if remaining < 0:
        return violation(
            RejectionCode.ADVANCE_EXCEEDS_FARE,
            "The reservation advance is larger than the fare; book the full trip instead.",
        )
    return FareBreakdown(
        final_payable=int(advance_amount),
        advance_amount=int(advance_amount),
        remaining_amount=remaining,
        **common,
    )
