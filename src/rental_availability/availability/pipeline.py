"""Reconciliation passes chained for the listing and search views."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .conflicts import filter_conflicts
from .merger import merge_periods
from .models import AvailabilityRecord, Booking, SearchRequest
from .search import search_availability


def prepare_spans(
    records: Iterable[AvailabilityRecord],
    bookings: Iterable[Booking] = (),
    *,
    now: Optional[datetime] = None,
) -> List[AvailabilityRecord]:
    """Merged spans still open to the user; the flexible-dates listing."""
    return filter_conflicts(merge_periods(records), bookings, now=now)


def find_stays(
    records: Iterable[AvailabilityRecord],
    request: SearchRequest,
    bookings: Iterable[Booking] = (),
    *,
    now: Optional[datetime] = None,
) -> List[AvailabilityRecord]:
    return search_availability(prepare_spans(records, bookings, now=now), request)
