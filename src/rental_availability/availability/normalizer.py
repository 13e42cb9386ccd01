"""Utilities to transform raw spreadsheet rows into availability records."""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Sequence

from .dates import DateRangeError, parse_date_range
from .models import AvailabilityRecord

logger = logging.getLogger(__name__)

# Column order of the upstream sheet (range A2:M).
COL_CANCEL_BY = 0
COL_ACCOUNT = 1
COL_RESORT = 2
COL_UNIT_TYPE = 3
COL_DATE_RANGE = 4
COL_NIGHTS = 5
COL_BOOK_DATE = 6
COL_CASH_COST = 7
COL_POINTS_COST = 8
COL_BOOKING_CODE = 9
COL_HOUSEKEEPING = 10
COL_USAGE = 11

DEFAULT_PHOTO_URL = "https://images.unsplash.com/photo-1566073771259-6a8506099945?w=400&h=250&fit=crop&q=80"

RESORT_PHOTOS: dict[str, str] = {
    "Dolphin C": DEFAULT_PHOTO_URL,
    "Dolphin Cove": "https://images.unsplash.com/photo-1571003123894-1f0594d2b5d9?w=400&h=250&fit=crop&q=80",
    "Yellowstone": "https://images.unsplash.com/photo-1544551763-46a013bb70d5?w=400&h=250&fit=crop&q=80",
}

LISTING_BASE_URL = "https://airbnb.com"

_MIN_STAY = re.compile(r"(\d+)D", re.IGNORECASE)
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def _cell(row: Sequence[object], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def _to_int(value: str) -> int:
    match = re.match(r"^\s*-?\d+", value or "")
    if not match:
        return 0
    return int(match.group(0))


def _slugify(value: str) -> str:
    return _NON_SLUG.sub("-", value.lower()).strip("-")


def extract_min_stay_days(usage: Optional[str]) -> int:
    """Minimum stay encoded as ``<n>D`` in the usage column; 1 when absent."""
    if not usage:
        return 1
    match = _MIN_STAY.search(usage)
    if not match:
        return 1
    return max(int(match.group(1)), 1)


def resort_photo(resort: str, *, default: str = DEFAULT_PHOTO_URL) -> str:
    return RESORT_PHOTOS.get((resort or "").strip(), default)


def listing_link(resort: str, booking_code: str) -> str:
    base_code = (booking_code or "").split(",")[0].strip() or "airbnb"
    clean_resort = re.sub(r"\s+", "-", (resort or "").strip().lower())
    return f"{LISTING_BASE_URL}/{base_code}-{clean_resort}"


def build_availability_id(account: str, resort: str, unit_type: str, index: int) -> str:
    return "-".join(
        part for part in (_slugify(account), _slugify(resort), _slugify(unit_type), str(index)) if part
    )


def missing_required_fields(row: Sequence[object]) -> List[str]:
    missing: List[str] = []
    for name, index in (
        ("cancel_by_date", COL_CANCEL_BY),
        ("account", COL_ACCOUNT),
        ("resort", COL_RESORT),
        ("unit_type", COL_UNIT_TYPE),
        ("date_range", COL_DATE_RANGE),
    ):
        if not _cell(row, index):
            missing.append(name)
    date_range = _cell(row, COL_DATE_RANGE)
    if date_range and "-" not in date_range:
        missing.append("date_range")
    return missing


def build_availability_record(
    row: Sequence[object],
    *,
    index: int,
    reference_date: date,
    default_photo: str = DEFAULT_PHOTO_URL,
) -> Optional[AvailabilityRecord]:
    """Normalise one sheet row; ``None`` when the row is unusable."""
    missing = missing_required_fields(row)
    if missing:
        logger.warning("Skipping row %s (missing or invalid: %s): %s", index + 2, ", ".join(missing), list(row))
        return None

    account = _cell(row, COL_ACCOUNT)
    resort = _cell(row, COL_RESORT)
    unit_type = _cell(row, COL_UNIT_TYPE)
    date_range = _cell(row, COL_DATE_RANGE)
    try:
        start, end = parse_date_range(date_range, reference_date=reference_date)
    except DateRangeError as exc:
        logger.warning("Skipping row %s: %s", index + 2, exc)
        return None

    booking_code = _cell(row, COL_BOOKING_CODE)
    usage = _cell(row, COL_USAGE)
    return AvailabilityRecord(
        account=account,
        resort=resort,
        unit_type=unit_type,
        start=start,
        end=end,
        nights=_to_int(_cell(row, COL_NIGHTS)),
        cost=_cell(row, COL_CASH_COST),
        min_stay_days=extract_min_stay_days(usage),
        availability_id=build_availability_id(account, resort, unit_type, index),
        cancel_by_date=_cell(row, COL_CANCEL_BY),
        book_date=_cell(row, COL_BOOK_DATE),
        points_cost=_cell(row, COL_POINTS_COST) or "N/A",
        booking_code=booking_code,
        housekeeping=_cell(row, COL_HOUSEKEEPING),
        usage=usage,
        photo=resort_photo(resort, default=default_photo),
        link=listing_link(resort, booking_code),
    )


def build_availability_records(
    rows: Iterable[Sequence[object]],
    *,
    reference_date: date,
    default_photo: str = DEFAULT_PHOTO_URL,
) -> List[AvailabilityRecord]:
    records: List[AvailabilityRecord] = []
    total = 0
    for index, row in enumerate(rows):
        total += 1
        record = build_availability_record(
            row,
            index=index,
            reference_date=reference_date,
            default_photo=default_photo,
        )
        if record is not None:
            records.append(record)
    logger.info("Normalised %s of %s sheet rows", len(records), total)
    return records
