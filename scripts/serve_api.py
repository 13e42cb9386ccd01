"""Run the availability backend locally."""
from __future__ import annotations

import argparse
from pathlib import Path

import uvicorn

from rental_availability.api import create_app
from rental_availability.config.settings import Settings
from rental_availability.core.logging import configure_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve GET /api/availability from a sheet export")
    parser.add_argument("--csv", type=Path, help="CSV export of the availability sheet")
    parser.add_argument("--host", help="Bind address (defaults to settings)")
    parser.add_argument("--port", type=int, help="Port (defaults to settings)")
    args = parser.parse_args()

    settings = Settings()
    if args.csv:
        settings.rows_csv_path = args.csv
    configure_logging(settings.log_level, settings.log_dir, filename=settings.log_file_name)

    uvicorn.run(
        create_app(settings),
        host=args.host or settings.server_host,
        port=args.port or settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
