"""
tables/writer.py

Flat delimited output for a finalized AccumulatorStore.

Layout:
    column 0       grouping label, e.g. "CARRIER|ORIGIN"
    columns 1..3k  <field>_Sum, <field>_Count, <field>_Mean  per measured field

Sum and mean use fixed-point rendering with FLOAT_PRECISION decimals
(6 by default: 150 → "150.000000"); count is a plain integer.
"""

from __future__ import annotations

import csv
import logging
import os
from typing import Iterator, Sequence

from ..config import settings
from ..errors import TableWriteError
from ..aggregation.store import AccumulatorStore, Bucket

logger = logging.getLogger(__name__)

AGGREGATE_SUFFIXES = ("Sum", "Count", "Mean")


def header_row(label: str, measured_fields: Sequence[str]) -> list[str]:
    header = [label]
    for name in measured_fields:
        header.extend(f"{name}_{suffix}" for suffix in AGGREGATE_SUFFIXES)
    return header


def format_row(key: str, bucket: Bucket, precision: int | None = None) -> list[str]:
    """Render one group as [key, sum, count, mean, sum, count, mean, ...]."""
    digits = settings.FLOAT_PRECISION if precision is None else precision
    cells = [key]
    for acc in bucket.values():
        if acc.mean is None:
            raise ValueError(f"group {key!r} has not been finalized")
        cells.append(f"{acc.sum:.{digits}f}")
        cells.append(str(acc.count))
        cells.append(f"{acc.mean:.{digits}f}")
    return cells


def iter_table_rows(
    store: AccumulatorStore,
    label: str,
    precision: int | None = None,
) -> Iterator[list[str]]:
    """Yield the header followed by one formatted row per group, in key order."""
    yield header_row(label, store.measured_fields)
    for key, bucket in store.items():
        yield format_row(key, bucket, precision)


def write_pivot_table(
    path: str,
    store: AccumulatorStore,
    label: str,
    precision: int | None = None,
    delimiter: str | None = None,
    encoding: str | None = None,
) -> int:
    """
    Write ``store`` to ``path`` as a delimited table.

    Missing parent directories are created. Returns the number of data rows
    written. Any OSError is re-raised as TableWriteError carrying the store,
    which is left untouched.
    """
    if not store.finalized:
        raise ValueError("store must be finalized before it is written")

    rows = iter_table_rows(store, label, precision)
    written = 0
    try:
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)
        with open(path, "w", newline="", encoding=encoding or settings.CSV_ENCODING) as fh:
            writer = csv.writer(fh, delimiter=delimiter or settings.CSV_DELIMITER)
            writer.writerow(next(rows))
            for row in rows:
                writer.writerow(row)
                written += 1
    except OSError as exc:
        logger.error("Pivot table write failed path=%r: %s", path, exc)
        raise TableWriteError(path, exc, store=store) from exc

    logger.info("Wrote %d group row(s) to %r", written, path)
    return written
