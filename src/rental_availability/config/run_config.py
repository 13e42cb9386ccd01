"""User-friendly run configuration loader for manual searches."""
from __future__ import annotations

import re
import tomllib
from datetime import date, timedelta
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator, model_validator

from rental_availability.availability.models import SearchRequest

if TYPE_CHECKING:  # pragma: no cover
    from rental_availability.config.settings import Settings

_RELATIVE_DATE = re.compile(r"^(?P<count>\d+)\s*(?P<unit>[dDwWmM])$")


class SearchSection(BaseModel):
    """Requested stay and listing filters decoded from the run config."""

    check_in: Optional[str] = Field(
        default=None, description="ISO 8601 date or relative offset such as '+14d'"
    )
    check_out: Optional[str] = Field(default=None, description="ISO 8601 date or relative offset")
    nights: Optional[int] = Field(
        default=None, ge=1, description="Stay length used when `check_out` is not provided"
    )
    resort: Optional[str] = None
    unit_type: Optional[str] = None
    guests: Optional[int] = Field(default=None, ge=1)
    min_stay: Optional[int] = Field(default=None, ge=1)
    max_stay: Optional[int] = Field(default=None, ge=1)

    @field_validator("resort", "unit_type", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _validate_stay_bounds(self) -> "SearchSection":
        if self.min_stay and self.max_stay and self.min_stay > self.max_stay:
            raise ValueError("min_stay cannot exceed max_stay")
        return self

    def to_request(self, *, today: Optional[date] = None) -> SearchRequest:
        check_in = parse_date(self.check_in, today=today) if self.check_in else None
        check_out = parse_date(self.check_out, today=today) if self.check_out else None
        if check_out is None and check_in is not None and self.nights:
            check_out = check_in + timedelta(days=self.nights)
        return SearchRequest(
            check_in=check_in,
            check_out=check_out,
            resort=self.resort,
            unit_type=self.unit_type,
            guest_count=self.guests,
            min_stay=self.min_stay,
            max_stay=self.max_stay,
        )


class SourceSection(BaseModel):
    """Where availability and bookings come from."""

    api_base_url: Optional[str] = None
    rows_csv_path: Optional[str] = Field(
        default=None, description="Read a sheet CSV export directly instead of calling the API"
    )
    bookings_path: Optional[str] = Field(default=None, description="JSON file with the user's bookings")
    reference_date: Optional[str] = Field(
        default=None, description="Date whose year is assumed for M/D ranges"
    )
    fetch_timeout_s: Optional[float] = Field(default=None, gt=0)
    log_level: Optional[str] = None


class RunConfig(BaseModel):
    """Top-level configuration decoded from TOML."""

    profile: str = Field(default="default", description="Human label used for logging")
    notes: Optional[str] = None
    search: SearchSection = Field(default_factory=SearchSection)
    source: SourceSection = Field(default_factory=SourceSection)

    @classmethod
    def load(cls, path: Path) -> "RunConfig":
        """Load a config from a TOML file."""
        data = tomllib.loads(path.read_text())
        return cls.model_validate(data)

    # Public API -----------------------------------------------------------------

    def apply_to(self, settings: "Settings", *, base_dir: Optional[Path] = None) -> None:
        """Apply overrides to an existing Settings instance."""
        source = self.source
        if source.api_base_url:
            settings.api_base_url = source.api_base_url
        if source.rows_csv_path:
            settings.rows_csv_path = _resolve_path(source.rows_csv_path, base_dir)
        if source.reference_date:
            settings.reference_date = parse_date(source.reference_date)
        if source.fetch_timeout_s is not None:
            settings.fetch_timeout_s = source.fetch_timeout_s
        if source.log_level:
            settings.log_level = source.log_level

    def bookings_file(self, *, base_dir: Optional[Path] = None) -> Optional[Path]:
        if not self.source.bookings_path:
            return None
        return _resolve_path(self.source.bookings_path, base_dir)

    def search_request(self, *, today: Optional[date] = None) -> SearchRequest:
        return self.search.to_request(today=today)


def _resolve_path(raw: str, base_dir: Optional[Path]) -> Path:
    path = Path(raw).expanduser()
    if not path.is_absolute() and base_dir:
        return (base_dir / path).resolve()
    return path


def parse_date(value: str, *, today: Optional[date] = None) -> date:
    today = today or date.today()
    text = value.strip()
    lowered = text.lower()
    if lowered == "today":
        return today
    if lowered.startswith("today+"):
        text = f"+{text.split('+', 1)[1]}"
        lowered = text.lower()
    if lowered.startswith("+"):
        match = _RELATIVE_DATE.match(lowered[1:])
        if not match:
            raise ValueError(
                f"Unsupported relative date format '{value}'. Use forms like '+14d', '+2w', '+1m'."
            )
        count = int(match.group("count"))
        unit = match.group("unit").lower()
        if unit == "d":
            delta = timedelta(days=count)
        elif unit == "w":
            delta = timedelta(weeks=count)
        else:
            # Months are 30-day blocks.
            delta = timedelta(days=30 * count)
        return today + delta
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(
            f"Invalid date '{value}'. Provide ISO format (YYYY-MM-DD) or a relative offset."
        ) from exc


__all__ = ["RunConfig", "SearchSection", "SourceSection", "parse_date"]
