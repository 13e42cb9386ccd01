"""Availability domain models and reconciliation helpers."""

from .conflicts import filter_conflicts, is_active_booking, pending_hold_expiration
from .dates import DateRangeError, parse_date_range
from .drafts import build_booking_draft
from .merger import merge_periods
from .models import AvailabilityRecord, Booking, BookingDraft, SearchRequest
from .normalizer import build_availability_record, build_availability_records
from .pipeline import find_stays, prepare_spans
from .search import (
    facet_options,
    search_availability,
    stay_window,
    validate_search_request,
    validate_selection,
)

__all__ = [
    "AvailabilityRecord",
    "Booking",
    "BookingDraft",
    "DateRangeError",
    "SearchRequest",
    "build_availability_record",
    "build_availability_records",
    "build_booking_draft",
    "facet_options",
    "filter_conflicts",
    "find_stays",
    "is_active_booking",
    "merge_periods",
    "parse_date_range",
    "pending_hold_expiration",
    "prepare_spans",
    "search_availability",
    "stay_window",
    "validate_search_request",
    "validate_selection",
]
