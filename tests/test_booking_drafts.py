from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from rental_availability.availability import AvailabilityRecord, build_booking_draft
from rental_availability.availability.drafts import format_cost, parse_cost, prorate_cost


def _span(cost: str = "$300.00", nights: int = 3, ident: str = "X") -> AvailabilityRecord:
    return AvailabilityRecord(
        account="A",
        resort="Dolphin Cove",
        unit_type="2 bedroom",
        start=date(2025, 9, 1),
        end=date(2025, 9, 10),
        nights=nights,
        cost=cost,
        availability_id=ident,
    )


def test_two_night_draft_is_prorated_from_nightly_rate():
    draft = build_booking_draft(_span(), date(2025, 9, 3), date(2025, 9, 5))

    assert draft.valid is True
    assert draft.error is None
    assert draft.nights == 2
    assert draft.cost == "$200.00"
    assert draft.availability_id == "X"
    assert draft.check_in == "9/3/2025"
    assert draft.check_out == "9/5/2025"
    assert draft.date_range == "9/3-9/5"
    assert draft.to_dict()["unitType"] == "2 bedroom"


def test_draft_uses_original_row_nights_after_merge():
    span = _span(cost="$1,366.60", nights=4)
    span.nights = 9

    draft = build_booking_draft(span, date(2025, 9, 1), date(2025, 9, 4))

    assert draft.cost == "$1,024.95"


def test_partial_days_round_nights_up():
    draft = build_booking_draft(_span(), datetime(2025, 9, 3, 12), datetime(2025, 9, 5, 15))

    assert draft.nights == 3
    assert draft.cost == "$300.00"


@pytest.mark.parametrize(
    ("span", "start", "end", "error"),
    [
        (_span(nights=0), date(2025, 9, 3), date(2025, 9, 5), "No nightly basis"),
        (_span(cost="call us"), date(2025, 9, 3), date(2025, 9, 5), "Unreadable cost"),
        (_span(cost=""), date(2025, 9, 3), date(2025, 9, 5), "Unreadable cost"),
        (_span(), date(2025, 9, 5), date(2025, 9, 5), "Check-out must be after check-in"),
        (_span(), date(2025, 9, 6), date(2025, 9, 5), "Check-out must be after check-in"),
    ],
)
def test_invalid_drafts_are_flagged_not_raised(span, start, end, error):
    draft = build_booking_draft(span, start, end)

    assert draft.valid is False
    assert draft.cost is None
    assert error in draft.error


def test_proration_is_linear_within_a_cent():
    span = _span(cost="$366.60", nights=3)
    one_night = prorate_cost(span, 1)

    for nights in range(1, 15):
        assert abs(prorate_cost(span, nights) - one_night * nights) <= Decimal("0.01")


def test_cost_parsing_and_formatting():
    assert parse_cost("$1,366.60") == Decimal("1366.60")
    assert parse_cost(" 42 ") == Decimal("42")
    assert parse_cost("NaN") is None
    assert parse_cost(None) is None
    assert format_cost(Decimal("200")) == "$200.00"
    assert format_cost(Decimal("0.005")) == "$0.01"
