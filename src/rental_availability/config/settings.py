"""Runtime configuration for the availability tool.

Relies on pydantic-settings so that environment variables (prefixed with ``RENTALS_``)
can override defaults.
"""
from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Annotated, Iterable, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from rental_availability.availability.normalizer import DEFAULT_PHOTO_URL

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Captures runtime configuration for the backend and the search CLI."""

    api_base_url: str = Field(
        default="http://localhost:4000",
        description="Base URL of the backend serving /api/availability",
    )
    fetch_timeout_s: float = Field(default=10.0, description="Seconds before an availability fetch fails")
    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("data/logs"))
    log_file_name: str = Field(default="rentals.log", description="File inside log_dir that receives the log stream")
    rows_csv_path: Optional[Path] = Field(
        default=None, description="CSV export of the availability sheet served by the backend"
    )
    reference_date: Optional[date] = Field(
        default=None,
        description="Date whose year is assumed for M/D ranges; today when unset",
    )
    pending_hold_hours: float = Field(default=24.0, description="Hold window for pending bookings")
    default_photo_url: str = Field(default=DEFAULT_PHOTO_URL)
    cors_origins: Annotated[Tuple[str, ...], NoDecode] = Field(default=("*",), description="Origins allowed to call the API")
    server_host: str = "127.0.0.1"
    server_port: int = 4000

    model_config = SettingsConfigDict(
        env_prefix="RENTALS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_dir", mode="before")
    def _expand_log_dir(cls, value: str | Path) -> Path:
        if isinstance(value, Path):
            return value
        return Path(value).expanduser()

    @field_validator("rows_csv_path", mode="before")
    def _expand_rows_path(cls, value: str | Path | None) -> Optional[Path]:
        if value in (None, ""):
            return None
        return Path(value).expanduser()

    @field_validator("reference_date", mode="before")
    def _parse_reference_date(cls, value: str | date | None) -> Optional[date]:
        if value in (None, ""):
            return None
        if isinstance(value, date):
            return value
        return date.fromisoformat(value)

    @field_validator("fetch_timeout_s", "pending_hold_hours")
    def _validate_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("cors_origins", mode="before")
    def _parse_cors_origins(cls, value: object) -> Tuple[str, ...]:
        if value is None or value == "":
            return ()
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value if str(item))
        if isinstance(value, str):
            origins: Iterable[str] = (origin.strip() for origin in value.split(","))
            return tuple(origin for origin in origins if origin)
        raise TypeError("cors_origins must be provided as a comma-separated string or list")

    def effective_reference_date(self) -> date:
        return self.reference_date or date.today()
