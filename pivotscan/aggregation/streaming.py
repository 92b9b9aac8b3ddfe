"""
aggregation/streaming.py

StreamingAggregator: single-pass pivot over a row source of unknown length.

Lifecycle (ScanState):
    NOT_STARTED → SCANNING → EARLY_STOPPED | EXHAUSTED → FINALIZED → EMITTED

Design:
  - Rows are pulled one at a time and never retained; memory is
    O(distinct keys × measured fields) whatever the input size.
  - rows_scanned counts every examined row, filtered or not.
  - max_rows >= 0 bounds the scan: once rows_scanned reaches it, the loop
    stops before asking the source for another row. -1 means no bound.
  - The table is emitted only when an output path is given.

Thread safety: NOT thread-safe. Each run() owns a fresh store.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Mapping, Sequence

from ..config import settings
from ..filters import FilterSet, FilterSpec
from ..metrics import TOTALS
from ..tables.writer import write_pivot_table
from .base import PivotPlan, PivotResult, ScanState
from .keys import KeyFunc

logger = logging.getLogger(__name__)

NO_ROW_LIMIT = -1


class StreamingAggregator:
    """
    Folds rows from any iterable into an AccumulatorStore in a single pass.

    Args:
        plan:           What to group, measure and filter.
        progress_every: Log progress every N scanned rows (0 disables).
    """

    def __init__(self, plan: PivotPlan, progress_every: int | None = None) -> None:
        self.plan = plan
        self._progress_every = (
            settings.PROGRESS_LOG_EVERY if progress_every is None else progress_every
        )
        self.state = ScanState.NOT_STARTED

    def run(
        self,
        rows: Iterable[Mapping[str, object]],
        max_rows: int = NO_ROW_LIMIT,
        output_path: str | None = None,
    ) -> PivotResult:
        if max_rows < NO_ROW_LIMIT:
            raise ValueError(f"max_rows must be -1 or a non-negative bound, got {max_rows}")

        t0 = time.monotonic()
        store = self.plan.new_store()
        result = PivotResult(store=store)
        source = iter(rows)
        self.state = ScanState.SCANNING
        logger.info("Streaming pivot started: %r max_rows=%d", self.plan, max_rows)

        while True:
            if max_rows != NO_ROW_LIMIT and result.rows_scanned >= max_rows:
                self.state = ScanState.EARLY_STOPPED
                result.stopped_early = True
                logger.warning("Row bound reached after %d row(s); stopping scan", result.rows_scanned)
                break
            try:
                row = next(source)
            except StopIteration:
                self.state = ScanState.EXHAUSTED
                break

            if self.plan.process(row, store, index=result.rows_scanned):
                result.rows_included += 1
            result.rows_scanned += 1

            if self._progress_every and result.rows_scanned % self._progress_every == 0:
                logger.info(
                    "Scanned %d rows: %d included, %d group(s)",
                    result.rows_scanned, result.rows_included, len(store),
                )

        store.finalize()
        self.state = ScanState.FINALIZED

        if output_path is not None:
            write_pivot_table(output_path, store, self.plan.label)
            result.output_path = output_path
            self.state = ScanState.EMITTED

        result.state = self.state
        result.elapsed_seconds = time.monotonic() - t0
        TOTALS.record(result)
        logger.info(
            "Finished processing the %d-row dataset in %.3f seconds (%d included, %d groups)",
            result.rows_scanned, result.elapsed_seconds, result.rows_included, len(store),
        )
        return result


def run_streaming(
    rows: Iterable[Mapping[str, object]],
    grouping_fields: Sequence[str],
    measured_fields: Sequence[str],
    max_rows: int = NO_ROW_LIMIT,
    filters: FilterSet | FilterSpec | None = None,
    output_path: str | None = None,
    key_func: KeyFunc | None = None,
    label: str | None = None,
) -> PivotResult:
    """
    Pivot a row source in one forward pass.

    Returns a PivotResult whose ``rows_scanned`` is the final row counter and
    whose ``store`` is finalized. When ``output_path`` is given, the table is
    also written there.
    """
    plan = PivotPlan(
        grouping_fields,
        measured_fields,
        filters=filters,
        key_func=key_func,
        label=label,
    )
    return StreamingAggregator(plan).run(rows, max_rows=max_rows, output_path=output_path)
