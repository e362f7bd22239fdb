from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP

# Amounts are charged and stored in whole currency units
UNIT = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_unit(value: Decimal) -> int:
    """The single rounding step: half-up to a whole currency unit."""
    return int(to_decimal(value).quantize(UNIT, rounding=ROUND_HALF_UP))


def percent_of(amount, percentage) -> Decimal:
    return to_decimal(amount) * to_decimal(percentage) / HUNDRED


def floor_unit(value) -> int:
    return int(to_decimal(value).to_integral_value(rounding=ROUND_FLOOR))
