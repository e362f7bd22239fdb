"""Refund estimate for a cancellation under a trip's tiered rule table."""
from dataclasses import dataclass, asdict
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from travonex.core.clock import as_utc
from travonex.core.config import settings
from travonex.services.errors import InvariantViolation
from travonex.services.money import percent_of, to_unit


@dataclass(frozen=True)
class RefundRule:
    days_before_departure: int
    refund_percentage: int


@dataclass(frozen=True)
class RefundEstimate:
    eligible: bool
    lead_days: int
    refund_percentage: int
    refund_amount: int
    matched_rule: RefundRule | None = None

    def as_dict(self) -> dict:
        return asdict(self)


def departure_at(start_date: date, tz_name: str | None = None) -> datetime:
    """Departures are taken to leave at local midnight on the batch start date."""
    return datetime.combine(start_date, time.min, tzinfo=ZoneInfo(tz_name or settings.DEPARTURE_TIMEZONE))


def sorted_rules(rules) -> list[RefundRule]:
    """Normalise and validate a rule table, highest threshold first."""
    out = []
    seen = set()
    for r in rules:
        days, pct = int(r.days_before_departure), int(r.refund_percentage)
        if days < 0 or not 0 <= pct <= 100:
            raise InvariantViolation("malformed cancellation rule", days=days, refund_percentage=pct)
        if days in seen:
            raise InvariantViolation("duplicate cancellation threshold", days=days)
        seen.add(days)
        out.append(RefundRule(days, pct))
    return sorted(out, key=lambda r: r.days_before_departure, reverse=True)


def select_rule(lead_days: int, rules) -> RefundRule | None:
    # Most generous tier among the thresholds met; on a monotone table this is the first match.
    met = [r for r in sorted_rules(rules) if lead_days >= r.days_before_departure]
    if not met:
        return None
    return max(met, key=lambda r: (r.refund_percentage, r.days_before_departure))


def compute_refund(
    booking_amount: int,
    batch_start_date: date,
    now: datetime,
    rules,
    buffer: timedelta | None = None,
    tz_name: str | None = None,
) -> RefundEstimate:
    if booking_amount < 0:
        raise InvariantViolation("negative booking amount", booking_amount=booking_amount)
    if buffer is None:
        buffer = timedelta(hours=settings.CANCELLATION_BUFFER_HOURS)

    lead = departure_at(batch_start_date, tz_name) - as_utc(now)
    lead_days = lead.days  # whole calendar days, floored

    if lead <= buffer:
        return RefundEstimate(eligible=False, lead_days=lead_days, refund_percentage=0, refund_amount=0)

    rule = select_rule(lead_days, rules)
    pct = rule.refund_percentage if rule else 0
    return RefundEstimate(
        eligible=True,
        lead_days=lead_days,
        refund_percentage=pct,
        refund_amount=to_unit(percent_of(booking_amount, pct)),
        matched_rule=rule,
    )
