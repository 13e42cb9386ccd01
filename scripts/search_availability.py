"""Entry point for manual availability searches."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import List, Optional

from rental_availability.availability import (
    AvailabilityRecord,
    Booking,
    SearchRequest,
    build_availability_records,
    build_booking_draft,
    facet_options,
    prepare_spans,
    search_availability,
    validate_search_request,
    validate_selection,
)
from rental_availability.config.run_config import RunConfig, parse_date
from rental_availability.config.settings import Settings
from rental_availability.core.logging import configure_logging
from rental_availability.services import AvailabilityClient
from rental_availability.sources import CsvRowSource, load_bookings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search vacation-rental availability")
    parser.add_argument("--config", type=Path, help="Path to a run config TOML file")
    parser.add_argument("--check-in", help="ISO date, 'today' or relative offset such as '+14d'")
    parser.add_argument("--check-out", help="ISO date, 'today' or relative offset")
    parser.add_argument("--resort", help="Exact resort name")
    parser.add_argument("--unit-type", help="Substring of the unit type, e.g. '2 bedroom'")
    parser.add_argument("--guests", type=int, help="Number of guests")
    parser.add_argument("--bookings", type=Path, help="JSON file with the user's existing bookings")
    parser.add_argument("--csv", type=Path, help="Read a sheet CSV export instead of calling the API")
    parser.add_argument(
        "--flexible",
        action="store_true",
        help="List every open span instead of matching a specific stay",
    )
    parser.add_argument(
        "--book",
        type=int,
        metavar="N",
        help="Build a booking draft for result N (1-based) of the search",
    )
    parser.add_argument("--output", type=Path, help="Write results (and any draft) as JSON")
    return parser


async def _load_records(settings: Settings) -> Optional[List[AvailabilityRecord]]:
    if settings.rows_csv_path is not None:
        rows = CsvRowSource(settings.rows_csv_path).read_rows()
        return build_availability_records(
            rows,
            reference_date=settings.effective_reference_date(),
            default_photo=settings.default_photo_url,
        )
    async with AvailabilityClient(
        base_url=settings.api_base_url,
        timeout=settings.fetch_timeout_s,
        reference_date=settings.reference_date,
    ) as client:
        result = await client.refresh()
    if result.error:
        logger.error("Could not load availability: %s", result.error)
        return None
    return result.records


def _merge_request(args: argparse.Namespace, request: SearchRequest) -> SearchRequest:
    if args.check_in:
        request.check_in = parse_date(args.check_in)
    if args.check_out:
        request.check_out = parse_date(args.check_out)
    if args.resort:
        request.resort = args.resort
    if args.unit_type:
        request.unit_type = args.unit_type
    if args.guests:
        request.guest_count = args.guests
    return request


def _print_spans(spans: List[AvailabilityRecord]) -> None:
    for position, span in enumerate(spans, start=1):
        print(
            f"{position:>3}. {span.resort} | {span.unit_type} | {span.date_range} | "
            f"{span.cost} ({span.base_nights} nights) | min stay {span.min_stay_days} | {span.link}"
        )


async def run(
    settings: Settings,
    request: SearchRequest,
    bookings: List[Booking],
    *,
    flexible: bool,
    book: Optional[int],
    output: Optional[Path],
) -> int:
    if not flexible:
        problems = validate_search_request(request)
        if problems:
            for problem in problems:
                print(problem)
            return 2

    records = await _load_records(settings)
    if records is None:
        print("Availability is unavailable right now; please try again later.")
        return 1

    resorts, unit_types = facet_options(records)
    logger.info("Resorts: %s | Unit types: %s", ", ".join(resorts), ", ".join(unit_types))

    now = datetime.now(timezone.utc)
    spans = prepare_spans(records, bookings, now=now)
    results = spans if flexible else search_availability(spans, request)

    if results:
        print(f"Available units ({len(results)})")
        _print_spans(results)
    else:
        print("No available units found. Try adjusting the filters or use --flexible to list every open period.")

    payload: dict[str, object] = {"results": AvailabilityRecord.from_iterable(results)}
    if book is not None:
        if not 1 <= book <= len(results):
            print(f"No result number {book}")
            return 2
        span = results[book - 1]
        problems = validate_selection(span, request.check_in, request.check_out)
        if problems:
            for problem in problems:
                print(problem)
            return 2
        draft = build_booking_draft(span, request.check_in, request.check_out)
        payload["draft"] = draft.to_dict()
        if draft.valid:
            print(f"Draft: {draft.resort} {draft.unit_type} {draft.check_in} -> {draft.check_out} "
                  f"({draft.nights} nights) {draft.cost}")
        else:
            print(f"Could not prepare booking: {draft.error}")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        payload["generated_at"] = now.isoformat()
        output.write_text(json.dumps(payload, indent=2))
        logger.info("Wrote %s results to %s", len(results), output)
    return 0


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()
    run_config: Optional[RunConfig] = None
    request = SearchRequest(check_in=None, check_out=None)
    bookings_path: Optional[Path] = args.bookings

    if args.config:
        if not args.config.exists():
            raise FileNotFoundError(f"Config file not found: {args.config}")
        run_config = RunConfig.load(args.config)
        run_config.apply_to(settings, base_dir=args.config.parent)
        request = run_config.search_request(today=date.today())
        bookings_path = bookings_path or run_config.bookings_file(base_dir=args.config.parent)

    if args.csv:
        settings.rows_csv_path = args.csv
    request = _merge_request(args, request)

    configure_logging(settings.log_level, settings.log_dir, filename=settings.log_file_name)
    if run_config:
        logger.info("Loaded run profile '%s' from %s", run_config.profile, args.config)

    bookings = load_bookings(bookings_path, hold_hours=settings.pending_hold_hours) if bookings_path else []
    return asyncio.run(
        run(
            settings,
            request,
            bookings,
            flexible=args.flexible,
            book=args.book,
            output=args.output,
        )
    )


if __name__ == "__main__":
    raise SystemExit(main())
