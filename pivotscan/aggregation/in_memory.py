"""
aggregation/in_memory.py

InMemoryAggregator: pivot over rows that are already resident in memory.

Unlike the streaming path there is no row bound: the whole sequence is
walked once, index 0..N-1. Both the text and the numeric FilterSpec apply.
The finalized store is always returned, so callers can keep analysing it
without re-reading the written table.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence

from ..filters import FilterSet, FilterSpec
from ..metrics import TOTALS
from ..tables.writer import write_pivot_table
from .base import PivotPlan, PivotResult, ScanState
from .keys import KeyFunc
from .store import AccumulatorStore

logger = logging.getLogger(__name__)


class InMemoryAggregator:
    def __init__(self, plan: PivotPlan) -> None:
        self.plan = plan
        self.state = ScanState.NOT_STARTED

    def run(
        self,
        rows: Sequence[Mapping[str, object]],
        save_to_file: bool = False,
        output_path: str | None = None,
    ) -> PivotResult:
        if isinstance(rows, (str, bytes)) or not isinstance(rows, Sequence):
            raise TypeError(
                f"in-memory pivot needs a random-access sequence, got {type(rows).__name__}"
            )
        if save_to_file and not output_path:
            raise ValueError("save_to_file=True requires an output_path")

        t0 = time.monotonic()
        store = self.plan.new_store()
        result = PivotResult(store=store)
        self.state = ScanState.SCANNING

        for i in range(len(rows)):
            if self.plan.process(rows[i], store, index=i):
                result.rows_included += 1
            result.rows_scanned += 1
        self.state = ScanState.EXHAUSTED

        store.finalize()
        self.state = ScanState.FINALIZED

        if save_to_file:
            write_pivot_table(output_path, store, self.plan.label)
            result.output_path = output_path
            self.state = ScanState.EMITTED

        result.state = self.state
        result.elapsed_seconds = time.monotonic() - t0
        TOTALS.record(result)
        logger.info(
            "Finished processing the %d-row dataset in %.3f seconds (%d included, %d groups)",
            len(rows), result.elapsed_seconds, result.rows_included, len(store),
        )
        return result


def run_in_memory(
    rows: Sequence[Mapping[str, object]],
    grouping_fields: Sequence[str],
    measured_fields: Sequence[str],
    save_to_file: bool = False,
    filters: FilterSet | FilterSpec | None = None,
    output_path: str | None = None,
    key_func: KeyFunc | None = None,
    label: str | None = None,
) -> AccumulatorStore:
    """
    Pivot a fully materialised row sequence and return the finalized store.

    If ``save_to_file`` is True the table is also written to ``output_path``.
    A failed write raises TableWriteError; the store is still available on
    the exception's ``store`` attribute.
    """
    plan = PivotPlan(
        grouping_fields,
        measured_fields,
        filters=filters,
        key_func=key_func,
        label=label,
    )
    result = InMemoryAggregator(plan).run(rows, save_to_file=save_to_file, output_path=output_path)
    return result.store
