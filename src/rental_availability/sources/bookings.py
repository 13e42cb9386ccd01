"""Load the user's existing bookings from a JSON export."""
from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List

from rental_availability.availability.conflicts import DEFAULT_HOLD_HOURS, pending_hold_expiration
from rental_availability.availability.models import BOOKING_PENDING, Booking

logger = logging.getLogger(__name__)


def load_bookings(path: Path, *, hold_hours: float = DEFAULT_HOLD_HOURS) -> List[Booking]:
    """Read ``[{...}, ...]`` or ``{"bookings": [...]}``; bad entries are skipped.

    Pending bookings exported without ``bookingExpiration`` but with ``createdAt``
    get the standard hold window stamped on.
    """
    if not path.exists():
        raise FileNotFoundError(f"Bookings file not found at {path}")
    data = json.loads(path.read_text())
    entries = data.get("bookings", []) if isinstance(data, dict) else data
    bookings: List[Booking] = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping booking %s: expected an object", position)
            continue
        try:
            booking = Booking.from_dict(entry)
        except ValueError as exc:
            logger.warning("Skipping booking %s: %s", position, exc)
            continue
        if booking.status == BOOKING_PENDING and booking.booking_expiration is None and booking.created_at:
            booking = replace(
                booking,
                booking_expiration=pending_hold_expiration(booking.created_at, hold_hours=hold_hours),
            )
        bookings.append(booking)
    logger.info("Loaded %s bookings from %s", len(bookings), path)
    return bookings
