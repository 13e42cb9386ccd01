"""Drop availability spans that collide with the user's active bookings."""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Set

from .dates import iter_nights
from .models import (
    BOOKING_CANCELLED,
    BOOKING_CONFIRMED,
    BOOKING_PENDING,
    AvailabilityRecord,
    Booking,
)

logger = logging.getLogger(__name__)

DEFAULT_HOLD_HOURS = 24


def pending_hold_expiration(created_at: datetime, *, hold_hours: float = DEFAULT_HOLD_HOURS) -> datetime:
    """Expiration to stamp on a new pending booking."""
    return created_at + timedelta(hours=hold_hours)


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_active_booking(booking: Booking, *, now: datetime) -> bool:
    if booking.status == BOOKING_CONFIRMED:
        return True
    if booking.status == BOOKING_CANCELLED:
        return False
    if booking.status == BOOKING_PENDING:
        if booking.booking_expiration is None:
            return False
        return _aware(now) < _aware(booking.booking_expiration)
    return False


def booked_dates_by_availability(bookings: Iterable[Booking], *, now: datetime) -> Dict[str, Set[date]]:
    booked: Dict[str, Set[date]] = {}
    for booking in bookings:
        if not booking.original_availability_id or not is_active_booking(booking, now=now):
            continue
        booked.setdefault(booking.original_availability_id, set()).update(booking.booked_dates)
    return booked


def filter_conflicts(
    spans: Iterable[AvailabilityRecord],
    bookings: Iterable[Booking],
    *,
    now: Optional[datetime] = None,
) -> List[AvailabilityRecord]:
    """Keep only spans that share no night with an active booking on one of their ids.

    A merged span answers to every row id folded into it. A span with any booked
    night is dropped whole rather than carved up.
    """
    now = now or datetime.now(timezone.utc)
    booked = booked_dates_by_availability(bookings, now=now)
    kept: List[AvailabilityRecord] = []
    dropped = 0
    for span in spans:
        taken: Set[date] = set()
        for source_id in span.source_ids or (span.availability_id,):
            taken.update(booked.get(source_id, ()))
        if taken and any(day in taken for day in iter_nights(span.start, span.end)):
            dropped += 1
            continue
        kept.append(span)
    logger.info("Conflict filter kept %s spans, dropped %s", len(kept), dropped)
    return kept
