"""Dataclasses for availability spans, external bookings and booking drafts."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, FrozenSet, Iterable, List, Optional, Tuple

from .dates import format_date_range, iter_nights

BOOKING_CONFIRMED = "confirmed"
BOOKING_PENDING = "pending"
BOOKING_CANCELLED = "cancelled"
BOOKING_STATUSES = (BOOKING_CONFIRMED, BOOKING_PENDING, BOOKING_CANCELLED)


@dataclass(slots=True)
class AvailabilityRecord:
    """One availability period for an account/resort/unit combination.

    ``start`` and ``end`` are absolute calendar dates. ``nights`` is the length of
    the period as displayed; ``cost`` is the cash cost of the original row and
    ``base_nights`` the night count that cost covers. ``source_ids`` lists the
    availability ids of every row folded into this record.
    """

    account: str
    resort: str
    unit_type: str
    start: date
    end: date
    nights: int
    cost: str
    min_stay_days: int = 1
    availability_id: str = ""
    base_nights: Optional[int] = None
    cancel_by_date: str = ""
    book_date: str = ""
    points_cost: str = "N/A"
    booking_code: str = ""
    housekeeping: str = ""
    usage: str = ""
    photo: Optional[str] = None
    link: Optional[str] = None
    source_ids: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.base_nights is None:
            self.base_nights = self.nights
        if not self.source_ids and self.availability_id:
            self.source_ids = (self.availability_id,)

    @property
    def date_range(self) -> str:
        return format_date_range(self.start, self.end)

    @property
    def partition_key(self) -> tuple[str, str, str]:
        return (self.account, self.resort, self.unit_type)

    def to_payload(self) -> dict[str, object]:
        return {
            "availabilityId": self.availability_id,
            "sourceIds": list(self.source_ids),
            "cancelByDate": self.cancel_by_date,
            "account": self.account,
            "resort": self.resort,
            "unitType": self.unit_type,
            "dateRange": self.date_range,
            "startDate": self.start.isoformat(),
            "endDate": self.end.isoformat(),
            "nights": self.nights,
            "baseNights": self.base_nights,
            "bookDate": self.book_date,
            "cost": self.cost,
            "pointsCosts": self.points_cost,
            "bookingCode": self.booking_code,
            "hk": self.housekeeping,
            "usage": self.usage,
            "minStayDays": self.min_stay_days,
            "photo": self.photo,
            "link": self.link,
        }

    @classmethod
    def from_iterable(cls, records: Iterable["AvailabilityRecord"]) -> List[dict[str, object]]:
        return [record.to_payload() for record in records]


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_day(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO date, got {value!r}")
    return date.fromisoformat(value[:10])


@dataclass(slots=True)
class Booking:
    """A booking made elsewhere; read-only input to conflict filtering."""

    status: str
    original_availability_id: str
    booked_dates: FrozenSet[date] = field(default_factory=frozenset)
    booking_expiration: Optional[datetime] = None
    booking_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Booking":
        """Build a booking from its JSON shape.

        Booked dates come from ``bookedDates`` when present, otherwise from the
        half-open ``checkIn``/``checkOut`` range.
        """
        status = str(data.get("status") or "").strip().lower()
        if status not in BOOKING_STATUSES:
            raise ValueError(f"Unknown booking status '{data.get('status')}'")
        availability_id = str(data.get("originalAvailabilityId") or "").strip()
        if not availability_id:
            raise ValueError("Booking has no originalAvailabilityId")
        booked: set[date] = set()
        if data.get("bookedDates"):
            if not isinstance(data["bookedDates"], list):
                raise ValueError("bookedDates must be a list of ISO dates")
            booked.update(_parse_day(item) for item in data["bookedDates"])
        elif data.get("checkIn") and data.get("checkOut"):
            booked.update(iter_nights(_parse_day(data["checkIn"]), _parse_day(data["checkOut"])))
        return cls(
            status=status,
            original_availability_id=availability_id,
            booked_dates=frozenset(booked),
            booking_expiration=_parse_timestamp(data.get("bookingExpiration")),
            booking_id=data.get("id"),
            created_at=_parse_timestamp(data.get("createdAt")),
        )


@dataclass(slots=True)
class SearchRequest:
    """A requested stay plus the optional listing filters."""

    check_in: Optional[date]
    check_out: Optional[date]
    resort: Optional[str] = None
    unit_type: Optional[str] = None
    guest_count: Optional[int] = None
    min_stay: Optional[int] = None
    max_stay: Optional[int] = None

    @property
    def nights(self) -> int:
        if self.check_in is None or self.check_out is None:
            return 0
        return (self.check_out - self.check_in).days


@dataclass(slots=True)
class BookingDraft:
    """Handoff object for the confirmation step. Never persisted here."""

    resort: str
    unit_type: str
    check_in: str
    check_out: str
    nights: int
    cost: Optional[str]
    date_range: str
    availability_id: str
    valid: bool = True
    error: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "resort": self.resort,
            "unitType": self.unit_type,
            "checkIn": self.check_in,
            "checkOut": self.check_out,
            "nights": self.nights,
            "cost": self.cost,
            "dateRange": self.date_range,
            "availabilityId": self.availability_id,
            "valid": self.valid,
            "error": self.error,
        }
