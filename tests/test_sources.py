from __future__ import annotations

import json
from datetime import date, datetime, timezone

import pytest

from rental_availability.availability import SearchRequest, build_availability_records, find_stays
from rental_availability.availability.models import BOOKING_PENDING
from rental_availability.sources import SHEET_COLUMNS, CsvRowSource, StaticRowSource, load_bookings

SHEET_CSV = """\
Cancel-By Date,Account,Resort,Bdrm,Date Range,# of days,Book Date,Cash Costs,Points Costs,Booking Code,HK,Usage
9/10,A,Dolphin Cove,2 bedroom,9/1-9/5,4,6/1,$400.00,MM,HM1,,3D
9/10,A,Dolphin Cove,2 bedroom,9/6-9/10,4,6/1,$400.00,MM,HM2,,

9/20,B,Yellowstone,3 bedroom,9/12-9/19,7,6/2,$910.00,,,,
"""


def _write_sheet(tmp_path):
    path = tmp_path / "sheet.csv"
    path.write_text(SHEET_CSV, encoding="utf-8")
    return path


def test_csv_source_skips_header_and_blank_lines(tmp_path):
    rows = CsvRowSource(_write_sheet(tmp_path)).read_rows()

    assert len(rows) == 3
    assert rows[0][:5] == ["9/10", "A", "Dolphin Cove", "2 bedroom", "9/1-9/5"]
    assert len(rows[0]) == len(SHEET_COLUMNS)


def test_csv_source_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="not found"):
        CsvRowSource(tmp_path / "missing.csv").read_rows()


def test_static_source_returns_copies():
    source = StaticRowSource([["a", "b"]])
    rows = source.read_rows()
    rows[0].append("c")

    assert source.read_rows() == [["a", "b"]]


def test_sheet_export_to_search_results(tmp_path):
    rows = CsvRowSource(_write_sheet(tmp_path)).read_rows()
    records = build_availability_records(rows, reference_date=date(2025, 6, 1))

    results = find_stays(
        records,
        SearchRequest(check_in=date(2025, 9, 4), check_out=date(2025, 9, 8), guest_count=4),
    )

    assert [(span.start, span.end) for span in results] == [(date(2025, 9, 1), date(2025, 9, 10))]
    assert results[0].min_stay_days == 3


def test_load_bookings_accepts_both_shapes_and_skips_bad_entries(tmp_path):
    entries = [
        {
            "id": "b1",
            "status": "Confirmed",
            "originalAvailabilityId": "a-dolphin-cove-2-bedroom-0",
            "checkIn": "2025-09-03",
            "checkOut": "2025-09-05",
        },
        {
            "status": BOOKING_PENDING,
            "originalAvailabilityId": "b-yellowstone-3-bedroom-2",
            "bookedDates": ["2025-09-14"],
            "bookingExpiration": "2025-06-02T12:00:00Z",
        },
        {"status": "archived", "originalAvailabilityId": "x"},
        "not a booking",
    ]
    listed = tmp_path / "list.json"
    listed.write_text(json.dumps(entries))
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"bookings": entries}))

    for path in (listed, wrapped):
        bookings = load_bookings(path)
        assert [booking.booking_id for booking in bookings] == ["b1", None]
        confirmed, pending = bookings
        assert confirmed.status == "confirmed"
        assert confirmed.booked_dates == frozenset({date(2025, 9, 3), date(2025, 9, 4)})
        assert pending.booking_expiration == datetime(2025, 6, 2, 12, tzinfo=timezone.utc)


def test_load_bookings_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bookings(tmp_path / "bookings.json")


def test_pending_booking_without_expiration_gets_hold_window(tmp_path):
    path = tmp_path / "bookings.json"
    path.write_text(
        json.dumps(
            [
                {
                    "status": "pending",
                    "originalAvailabilityId": "x",
                    "bookedDates": ["2025-09-03"],
                    "createdAt": "2025-06-01T08:00:00",
                }
            ]
        )
    )

    (booking,) = load_bookings(path, hold_hours=6)

    assert booking.booking_expiration == datetime(2025, 6, 1, 14, tzinfo=timezone.utc)


def test_load_bookings_survives_malformed_entries(tmp_path):
    path = tmp_path / "bookings.json"
    path.write_text(
        json.dumps(
            [
                {"status": "confirmed", "originalAvailabilityId": "X", "bookedDates": 5},
                {"status": "confirmed", "checkIn": "2025-09-03", "checkOut": "2025-09-04"},
                {"status": "confirmed", "originalAvailabilityId": "Y", "bookedDates": ["2025-09-03"]},
            ]
        )
    )

    bookings = load_bookings(path)

    assert [booking.original_availability_id for booking in bookings] == ["Y"]
