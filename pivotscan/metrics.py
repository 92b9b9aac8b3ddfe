"""
pivotscan/metrics.py

Process-wide totals over completed aggregation calls.

Each aggregator reports its PivotResult once, after the store is finalized
(and the table written, if one was requested). Nothing is counted per row,
so the scan loops stay free of bookkeeping. A call that raises is not
recorded.

Usage:
    from pivotscan.metrics import TOTALS
    run_streaming(rows, ["CARRIER"], ["PASSENGERS"])
    print(TOTALS.as_dict())
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .aggregation.base import PivotResult


@dataclass(slots=True)
class RunTotals:
    runs: int = 0
    rows_scanned: int = 0
    rows_included: int = 0
    groups_created: int = 0
    tables_written: int = 0
    early_stops: int = 0
    elapsed_seconds: float = 0.0

    @property
    def rows_filtered(self) -> int:
        return self.rows_scanned - self.rows_included

    def record(self, result: PivotResult) -> None:
        """Fold one finished call into the totals."""
        self.runs += 1
        self.rows_scanned += result.rows_scanned
        self.rows_included += result.rows_included
        self.groups_created += len(result.store)
        self.elapsed_seconds += result.elapsed_seconds
        if result.output_path is not None:
            self.tables_written += 1
        if result.stopped_early:
            self.early_stops += 1

    def as_dict(self) -> dict:
        data = asdict(self)
        data["rows_filtered"] = self.rows_filtered
        return data

    def reset(self) -> None:
        """Zero every total (tests call this between runs)."""
        for name, value in asdict(RunTotals()).items():
            setattr(self, name, value)


TOTALS = RunTotals()
