"""
tests/test_metrics.py

Tests for metrics.py: run totals recorded by the aggregators.
"""

from __future__ import annotations

import pytest

from pivotscan.aggregation.base import PivotResult
from pivotscan.aggregation.in_memory import run_in_memory
from pivotscan.aggregation.store import AccumulatorStore
from pivotscan.aggregation.streaming import run_streaming
from pivotscan.errors import MissingFieldError
from pivotscan.filters import FilterSpec
from pivotscan.metrics import TOTALS, RunTotals
from pivotscan.models import Row


@pytest.fixture
def totals():
    TOTALS.reset()
    yield TOTALS
    TOTALS.reset()


ROWS = [
    {"CARRIER": "UA", "DEST_COUNTRY": "US", "PASSENGERS": 100},
    {"CARRIER": "UA", "DEST_COUNTRY": "GB", "PASSENGERS": 50},
    {"CARRIER": "AA", "DEST_COUNTRY": "US", "PASSENGERS": 30},
]


def result_with_groups(keys, scanned, included, **kwargs) -> PivotResult:
    store = AccumulatorStore(["PASSENGERS"])
    for key in keys:
        store.fold(key, Row({"PASSENGERS": 1}))
    store.finalize()
    return PivotResult(store=store, rows_scanned=scanned, rows_included=included, **kwargs)


class TestRunTotals:

    def test_record_accumulates(self):
        t = RunTotals()
        t.record(result_with_groups(["UA", "AA"], 5, 3, elapsed_seconds=0.5))
        t.record(result_with_groups(["DL"], 2, 1, stopped_early=True, output_path="out.csv"))
        assert t.runs == 2
        assert t.rows_scanned == 7
        assert t.rows_included == 4
        assert t.rows_filtered == 3
        assert t.groups_created == 3
        assert t.tables_written == 1
        assert t.early_stops == 1
        assert t.elapsed_seconds == pytest.approx(0.5)

    def test_as_dict_includes_filtered(self):
        t = RunTotals()
        t.record(result_with_groups(["UA"], 4, 1))
        d = t.as_dict()
        assert d["rows_filtered"] == 3
        assert d["runs"] == 1

    def test_reset(self):
        t = RunTotals()
        t.record(result_with_groups(["UA"], 4, 1))
        t.reset()
        assert t == RunTotals()


class TestTotalsFromAggregators:

    def test_in_memory_run_recorded(self, totals):
        run_in_memory(ROWS, ["CARRIER"], ["PASSENGERS"])
        d = totals.as_dict()
        assert d["runs"] == 1
        assert d["rows_scanned"] == 3
        assert d["rows_included"] == 3
        assert d["rows_filtered"] == 0
        assert d["groups_created"] == 2
        assert d["tables_written"] == 0

    def test_filtered_rows_counted(self, totals):
        spec = FilterSpec(exclude={"DEST_COUNTRY": ["US"]})
        run_streaming(ROWS, ["CARRIER"], ["PASSENGERS"], filters=spec)
        assert totals.rows_scanned == 3
        assert totals.rows_filtered == 2
        assert totals.rows_included == 1
        assert totals.groups_created == 1

    def test_table_write_and_early_stop_counted(self, totals, tmp_path):
        run_streaming(
            ROWS, ["CARRIER"], ["PASSENGERS"],
            max_rows=2, output_path=str(tmp_path / "p.csv"),
        )
        assert totals.tables_written == 1
        assert totals.early_stops == 1
        assert totals.rows_scanned == 2

    def test_failed_run_not_recorded(self, totals):
        with pytest.raises(MissingFieldError):
            run_streaming([{"CARRIER": "UA"}], ["CARRIER"], ["PASSENGERS"])
        assert totals.runs == 0
