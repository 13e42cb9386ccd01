"""Logging setup shared by the search CLI and the availability backend."""
from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_LOG_FILE = "rentals.log"

# httpx and httpcore log every request at INFO; the fetcher logs its own summary.
QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str, log_dir: Path, *, filename: str = DEFAULT_LOG_FILE) -> Path:
    """Send records to stderr and ``log_dir / filename``; returns the log file path."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / filename

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, delay=True),
        ],
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_path
