from datetime import date, datetime, timedelta, timezone

import pytest

from travonex.services.errors import InvariantViolation
from travonex.services.refund_calculator import RefundRule, compute_refund, departure_at, select_rule

START = date(2026, 12, 1)
DEPARTURE_UTC = datetime(2026, 12, 1, tzinfo=timezone.utc)
RULES = [RefundRule(30, 100), RefundRule(15, 50), RefundRule(7, 25)]


def refund(now, rules=RULES, amount=10000):
    return compute_refund(amount, START, now, rules, buffer=timedelta(hours=24), tz_name="UTC")


def test_twenty_days_out_selects_fifteen_day_tier():
    est = refund(DEPARTURE_UTC - timedelta(days=20))
    assert est.eligible
    assert est.lead_days == 20
    assert est.refund_percentage == 50
    assert est.refund_amount == 5000
    assert est.matched_rule == RefundRule(15, 50)


def test_twelve_hours_out_is_inside_the_buffer():
    est = refund(DEPARTURE_UTC - timedelta(hours=12))
    assert not est.eligible
    assert est.lead_days == 0
    assert est.refund_amount == 0


def test_buffer_boundary_is_exclusive():
    assert not refund(DEPARTURE_UTC - timedelta(hours=24)).eligible
    just_outside = refund(DEPARTURE_UTC - timedelta(hours=24, seconds=1))
    assert just_outside.eligible
    assert just_outside.refund_percentage == 0


def test_buffer_wins_over_any_rule_table():
    est = refund(DEPARTURE_UTC - timedelta(hours=6), rules=[RefundRule(0, 100)])
    assert not est.eligible


def test_lead_days_are_floored():
    est = refund(DEPARTURE_UTC - timedelta(days=14, hours=23))
    assert est.lead_days == 14
    assert est.refund_percentage == 25


def test_refund_amount_rounds_half_up():
    est = compute_refund(9975, START, DEPARTURE_UTC - timedelta(days=20), RULES,
                         buffer=timedelta(hours=24), tz_name="UTC")
    assert est.refund_amount == 4988


def test_empty_table_refunds_nothing():
    est = refund(DEPARTURE_UTC - timedelta(days=90), rules=[])
    assert est.eligible
    assert est.refund_percentage == 0


def test_percentage_never_increases_as_departure_nears():
    previous = 100
    for days in range(60, 1, -1):
        est = refund(DEPARTURE_UTC - timedelta(days=days, minutes=5))
        assert est.refund_percentage <= previous
        previous = est.refund_percentage


def test_most_generous_met_tier_selected_on_unordered_table():
    rules = [RefundRule(15, 50), RefundRule(30, 10)]
    assert select_rule(40, rules) == RefundRule(15, 50)
    assert select_rule(20, rules) == RefundRule(15, 50)
    assert select_rule(10, rules) is None


@pytest.mark.parametrize("rules", [
    [RefundRule(10, 120)],
    [RefundRule(10, -5)],
    [RefundRule(-1, 50)],
    [RefundRule(10, 50), RefundRule(10, 25)],
])
def test_malformed_tables_raise(rules):
    with pytest.raises(InvariantViolation):
        refund(DEPARTURE_UTC - timedelta(days=20), rules=rules)


def test_departure_is_local_midnight():
    dep = departure_at(START, "Asia/Kolkata")
    assert dep.astimezone(timezone.utc) == datetime(2026, 11, 30, 18, 30, tzinfo=timezone.utc)


def test_naive_now_treated_as_utc():
    est = refund(datetime(2026, 11, 11))
    assert est.lead_days == 20
