"""Match a requested stay against availability spans."""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from .models import AvailabilityRecord, SearchRequest

logger = logging.getLogger(__name__)

# Largest party each bedroom count is offered to.
GUEST_BUCKETS: Tuple[Tuple[int, str], ...] = (
    (2, "1 bedroom"),
    (4, "2 bedroom"),
    (6, "3 bedroom"),
)


def matches_guest_count(unit_type: str, guest_count: int) -> bool:
    if guest_count == 1:
        return True
    lowered = unit_type.lower()
    return any(guest_count <= limit and label in lowered for limit, label in GUEST_BUCKETS)


def contains_stay(span: AvailabilityRecord, check_in: date, check_out: date) -> bool:
    return check_in >= span.start and check_out <= span.end


def meets_min_stay(span: AvailabilityRecord, check_in: date, check_out: date) -> bool:
    return (check_out - check_in).days >= span.min_stay_days


def _passes_filters(span: AvailabilityRecord, request: SearchRequest) -> bool:
    if request.resort and span.resort != request.resort:
        return False
    if request.unit_type and request.unit_type not in span.unit_type:
        return False
    if request.guest_count and not matches_guest_count(span.unit_type, request.guest_count):
        return False
    if request.min_stay is not None and span.min_stay_days < request.min_stay:
        return False
    if request.max_stay is not None and span.min_stay_days > request.max_stay:
        return False
    return True


def validate_search_request(request: SearchRequest) -> List[str]:
    """User-facing problems with the requested dates; empty when searchable."""
    if request.check_in is None or request.check_out is None:
        return ["Please select both check-in and check-out dates"]
    if request.check_out <= request.check_in:
        return ["Check-out must be after check-in"]
    return []


def search_availability(spans: Iterable[AvailabilityRecord], request: SearchRequest) -> List[AvailabilityRecord]:
    """Spans that fully contain the requested stay and allow its length.

    Returns an empty list for an incomplete request or when nothing matches.
    """
    if validate_search_request(request):
        return []
    check_in = request.check_in
    check_out = request.check_out
    matches = [
        span
        for span in spans
        if _passes_filters(span, request)
        and contains_stay(span, check_in, check_out)
        and meets_min_stay(span, check_in, check_out)
    ]
    logger.info(
        "Search %s -> %s (%s nights) matched %s spans",
        check_in,
        check_out,
        request.nights,
        len(matches),
    )
    return matches


def validate_selection(span: AvailabilityRecord, check_in: Optional[date], check_out: Optional[date]) -> List[str]:
    """Check a date pick made inside one span before handing it to booking."""
    if check_in is None or check_out is None:
        return ["Please select check-in and check-out dates first"]
    errors: List[str] = []
    if check_out <= check_in:
        errors.append("Check-out must be after check-in")
    if not contains_stay(span, check_in, check_out):
        errors.append(f"Dates must fall within the available period {span.date_range}")
    nights = (check_out - check_in).days
    if nights > 0 and nights < span.min_stay_days:
        errors.append(f"Minimum stay is {span.min_stay_days} nights; selected {nights}")
    return errors


def stay_window(span: AvailabilityRecord) -> Tuple[date, date, date]:
    """Earliest check-in, latest check-in and latest check-out for ``span``."""
    latest_check_in = max(span.start, span.end - timedelta(days=span.min_stay_days))
    return span.start, latest_check_in, span.end


def facet_options(records: Iterable[AvailabilityRecord]) -> Tuple[List[str], List[str]]:
    """Distinct resorts and unit types in first-seen order."""
    resorts: List[str] = []
    unit_types: List[str] = []
    for record in records:
        if record.resort not in resorts:
            resorts.append(record.resort)
        if record.unit_type not in unit_types:
            unit_types.append(record.unit_type)
    return resorts, unit_types
