"""Row sources exposing the availability sheet's fixed column layout."""
from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Protocol, Sequence

logger = logging.getLogger(__name__)

SHEET_COLUMNS: tuple[str, ...] = (
    "Cancel-By Date",
    "Account",
    "Resort",
    "Bdrm",
    "Date Range",
    "# of days",
    "Book Date",
    "Cash Costs",
    "Points Costs",
    "Booking Code",
    "HK",
    "Usage",
)


class RowSource(Protocol):
    def read_rows(self) -> List[List[str]]:
        ...


class StaticRowSource:
    """Serves rows already held in memory."""

    def __init__(self, rows: Sequence[Sequence[str]]) -> None:
        self._rows = [list(row) for row in rows]

    def read_rows(self) -> List[List[str]]:
        return [list(row) for row in self._rows]


class CsvRowSource:
    """Reads a CSV export of the sheet, skipping the header row."""

    def __init__(self, path: Path, *, skip_header: bool = True) -> None:
        self.path = path
        self.skip_header = skip_header

    def read_rows(self) -> List[List[str]]:
        if not self.path.exists():
            raise FileNotFoundError(f"Availability export not found at {self.path}")
        with self.path.open(newline="", encoding="utf-8-sig") as handle:
            rows = [row for row in csv.reader(handle)]
        if self.skip_header and rows:
            rows = rows[1:]
        # Blank trailing lines come through as empty lists.
        rows = [row for row in rows if any(cell.strip() for cell in row)]
        logger.info("Read %s rows from %s", len(rows), self.path)
        return rows
