"""Client for the backend availability endpoint."""
from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from rental_availability.availability.dates import DateRangeError
from rental_availability.availability.models import AvailabilityRecord

from .schemas import AvailabilityPayload

logger = logging.getLogger(__name__)

AVAILABILITY_PATH = "/api/availability"


class AvailabilityFetchError(RuntimeError):
    """Raised when the availability payload cannot be retrieved or decoded."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(slots=True)
class FetchResult:
    """Outcome of a refresh; ``error`` is set instead of raising."""

    records: List[AvailabilityRecord] = field(default_factory=list)
    error: Optional[str] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.stale


def parse_availability_payload(items: Iterable[Any], *, reference_date: date) -> List[AvailabilityRecord]:
    records: List[AvailabilityRecord] = []
    for position, item in enumerate(items):
        try:
            payload = AvailabilityPayload.model_validate(item)
            records.append(payload.to_record(reference_date=reference_date, position=position))
        except (ValidationError, DateRangeError) as exc:
            logger.warning("Skipping availability item %s: %s", position, exc)
    return records


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:256]
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)[:256]
    return str(body)[:256]


class AvailabilityClient(AbstractAsyncContextManager["AvailabilityClient"]):
    """Fetches availability records and keeps the last successful payload.

    Every ``refresh`` takes a generation number; results from a refresh that was
    overtaken by a newer one are reported as stale and never stored.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        reference_date: Optional[date] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        default_headers = {
            "Accept": "application/json",
            "User-Agent": "rental-availability/0.1.0",
        }
        if headers:
            default_headers.update(headers)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=default_headers,
            transport=transport,
        )
        self._reference_date = reference_date
        self._records: List[AvailabilityRecord] = []
        self._generation = 0

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aexit__(self, exc_type, exc, exc_tb) -> None:
        await self.aclose()

    @property
    def last_records(self) -> List[AvailabilityRecord]:
        return list(self._records)

    async def fetch(self) -> List[AvailabilityRecord]:
        logger.debug("Requesting %s%s", self._client.base_url, AVAILABILITY_PATH)
        try:
            response = await self._client.get(AVAILABILITY_PATH)
        except httpx.HTTPError as exc:
            raise AvailabilityFetchError(f"Availability request failed: {exc}") from exc
        if response.status_code != 200:
            raise AvailabilityFetchError(
                f"Availability request failed ({response.status_code}): {_error_detail(response)}",
                status=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise AvailabilityFetchError("Availability response is not valid JSON", status=200) from exc
        if not isinstance(payload, list):
            raise AvailabilityFetchError(
                f"Availability response must be a JSON array, got {type(payload).__name__}",
                status=200,
            )
        reference_date = self._reference_date or date.today()
        records = parse_availability_payload(payload, reference_date=reference_date)
        logger.info("Fetched %s availability records (%s items received)", len(records), len(payload))
        return records

    async def refresh(self) -> FetchResult:
        self._generation += 1
        generation = self._generation
        try:
            records = await self.fetch()
        except AvailabilityFetchError as exc:
            if generation != self._generation:
                return FetchResult(records=self.last_records, stale=True)
            logger.warning("Availability refresh failed: %s", exc)
            return FetchResult(records=[], error=str(exc))
        if generation != self._generation:
            logger.info("Discarding stale availability refresh %s (latest is %s)", generation, self._generation)
            return FetchResult(records=self.last_records, stale=True)
        self._records = records
        return FetchResult(records=list(records))
