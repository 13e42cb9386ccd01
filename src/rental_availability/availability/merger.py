"""Coalesce overlapping or adjacent availability periods."""
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import timedelta
from typing import Dict, Iterable, List, Tuple

from .models import AvailabilityRecord

logger = logging.getLogger(__name__)

MAX_MERGE_GAP = timedelta(days=1)


def _merge_partition(records: List[AvailabilityRecord]) -> List[AvailabilityRecord]:
    # sorted() is stable, so equal starts keep their input order.
    ordered = sorted(records, key=lambda record: record.start)
    merged: List[AvailabilityRecord] = []
    current = ordered[0]
    for record in ordered[1:]:
        if record.start - current.end <= MAX_MERGE_GAP:
            end = max(current.end, record.end)
            current = replace(
                current,
                end=end,
                nights=(end - current.start).days,
                min_stay_days=max(current.min_stay_days, record.min_stay_days),
                source_ids=current.source_ids
                + tuple(ident for ident in record.source_ids if ident not in current.source_ids),
            )
        else:
            merged.append(current)
            current = record
    merged.append(current)
    return merged


def merge_periods(records: Iterable[AvailabilityRecord]) -> List[AvailabilityRecord]:
    """Merge periods sharing account, resort and unit type.

    Partitions are emitted in order of first appearance. A run of one record is
    returned as-is; a longer run keeps the identity, cost and rate basis of its
    earliest record and collects every folded row id in ``source_ids``.
    """
    partitions: Dict[Tuple[str, str, str], List[AvailabilityRecord]] = {}
    count = 0
    for record in records:
        count += 1
        partitions.setdefault(record.partition_key, []).append(record)

    spans: List[AvailabilityRecord] = []
    for partition in partitions.values():
        spans.extend(_merge_partition(partition))
    logger.info("Merged %s availability records into %s spans", count, len(spans))
    return spans
