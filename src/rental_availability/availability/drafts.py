"""Build the booking handoff for a chosen span and stay."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from .dates import DateLike, as_date, format_date_range, format_display_date, nights_between
from .models import AvailabilityRecord, BookingDraft

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def parse_cost(value: Optional[str]) -> Optional[Decimal]:
    """``"$1,366.60"`` -> ``Decimal("1366.60")``; ``None`` when unparseable."""
    if not value:
        return None
    cleaned = value.replace("$", "").replace(",", "").strip()
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def format_cost(amount: Decimal) -> str:
    return f"${amount.quantize(_CENTS, rounding=ROUND_HALF_UP):,.2f}"


def prorate_cost(span: AvailabilityRecord, nights: int) -> Optional[Decimal]:
    base = parse_cost(span.cost)
    if base is None or not span.base_nights:
        return None
    per_night = base / Decimal(span.base_nights)
    return (per_night * nights).quantize(_CENTS, rounding=ROUND_HALF_UP)


def build_booking_draft(
    span: AvailabilityRecord,
    requested_start: DateLike,
    requested_end: DateLike,
) -> BookingDraft:
    """Compute nights and prorated cost for a stay inside ``span``.

    Problems are reported on the draft (``valid=False``) instead of raised.
    """
    start = as_date(requested_start)
    end = as_date(requested_end)
    nights = nights_between(requested_start, requested_end)
    draft = BookingDraft(
        resort=span.resort,
        unit_type=span.unit_type,
        check_in=format_display_date(start),
        check_out=format_display_date(end),
        nights=max(nights, 0),
        cost=None,
        date_range=format_date_range(start, end),
        availability_id=span.availability_id,
    )
    if nights <= 0:
        draft.valid = False
        draft.error = "Check-out must be after check-in"
    elif not span.base_nights:
        draft.valid = False
        draft.error = f"No nightly basis for cost {span.cost!r}"
    else:
        amount = prorate_cost(span, nights)
        if amount is None:
            draft.valid = False
            draft.error = f"Unreadable cost {span.cost!r}"
        else:
            draft.cost = format_cost(amount)
    if not draft.valid:
        logger.warning("Invalid booking draft for %s: %s", span.availability_id, draft.error)
    return draft
