"""
FastAPI app serving normalised availability rows.

GET /api/availability returns the JSON array the search client consumes.
"""
from __future__ import annotations

import logging
import traceback
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rental_availability.availability.models import AvailabilityRecord
from rental_availability.availability.normalizer import build_availability_records
from rental_availability.config.settings import Settings
from rental_availability.sources.sheet_export import CsvRowSource, RowSource

logger = logging.getLogger(__name__)


def _default_row_source(settings: Settings) -> RowSource:
    if settings.rows_csv_path is None:
        raise RuntimeError("No row source configured; set RENTALS_ROWS_CSV_PATH")
    return CsvRowSource(settings.rows_csv_path)


def create_app(settings: Optional[Settings] = None, row_source: Optional[RowSource] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title="Rental availability")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.row_source = row_source

    @app.get("/api/availability")
    def availability():
        """Return every usable sheet row as an availability object."""
        logger.info("/api/availability requested")
        try:
            source = app.state.row_source or _default_row_source(settings)
            rows = source.read_rows()
            records = build_availability_records(
                rows,
                reference_date=settings.effective_reference_date(),
                default_photo=settings.default_photo_url,
            )
        except Exception as exc:
            logger.exception("Failed to build availability payload")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Server Error",
                    "detail": str(exc),
                    "stack": traceback.format_exc(),
                },
            )
        return AvailabilityRecord.from_iterable(records)

    @app.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return app
