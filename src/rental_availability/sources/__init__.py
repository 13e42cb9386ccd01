"""Upstream row sources and booking exports."""

from .bookings import load_bookings
from .sheet_export import SHEET_COLUMNS, CsvRowSource, RowSource, StaticRowSource

__all__ = [
    "SHEET_COLUMNS",
    "CsvRowSource",
    "RowSource",
    "StaticRowSource",
    "load_bookings",
]
