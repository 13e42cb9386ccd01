"""Wire schema for records served by ``GET /api/availability``."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rental_availability.availability.dates import parse_date_range
from rental_availability.availability.models import AvailabilityRecord
from rental_availability.availability.normalizer import build_availability_id


class AvailabilityPayload(BaseModel):
    """One availability object as the backend emits it (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account: str = Field(min_length=1)
    resort: str = Field(min_length=1)
    unit_type: str = Field(alias="unitType", min_length=1)
    date_range: str = Field(alias="dateRange", min_length=3)
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    nights: int = 0
    base_nights: Optional[int] = Field(default=None, alias="baseNights")
    cost: str = ""
    min_stay_days: int = Field(default=1, alias="minStayDays", ge=1)
    availability_id: str = Field(default="", alias="availabilityId")
    cancel_by_date: str = Field(default="", alias="cancelByDate")
    book_date: str = Field(default="", alias="bookDate")
    points_cost: str = Field(default="N/A", alias="pointsCosts")
    booking_code: str = Field(default="", alias="bookingCode")
    housekeeping: str = Field(default="", alias="hk")
    usage: str = ""
    photo: Optional[str] = None
    link: Optional[str] = None
    source_ids: List[str] = Field(default_factory=list, alias="sourceIds")

    @field_validator("nights", mode="before")
    @classmethod
    def _coerce_nights(cls, value: object) -> int:
        try:
            return int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0

    @field_validator("account", "resort", "unit_type", "date_range", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    def to_record(self, *, reference_date: date, position: int = 0) -> AvailabilityRecord:
        """Resolve absolute dates, preferring the ISO fields over ``dateRange``.

        Items served without an ``availabilityId`` get the same id the backend
        would derive for the row at ``position``.
        """
        if self.start_date is not None and self.end_date is not None:
            start, end = self.start_date, self.end_date
        else:
            start, end = parse_date_range(self.date_range, reference_date=reference_date)
        return AvailabilityRecord(
            account=self.account,
            resort=self.resort,
            unit_type=self.unit_type,
            start=start,
            end=end,
            nights=self.nights,
            cost=self.cost,
            min_stay_days=self.min_stay_days,
            availability_id=self.availability_id.strip()
            or build_availability_id(self.account, self.resort, self.unit_type, position),
            base_nights=self.base_nights,
            cancel_by_date=self.cancel_by_date,
            book_date=self.book_date,
            points_cost=self.points_cost,
            booking_code=self.booking_code,
            housekeeping=self.housekeeping,
            usage=self.usage,
            photo=self.photo,
            link=self.link,
            source_ids=tuple(self.source_ids),
        )
