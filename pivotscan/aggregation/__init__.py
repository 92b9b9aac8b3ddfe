"""
aggregation/__init__.py

Public API for the aggregation sub-package.
"""

from .store import Accumulator, AccumulatorStore
from .keys import KeyDeriver, derive_key, grouping_label
from .base import PivotPlan, PivotResult, ScanState
from .streaming import NO_ROW_LIMIT, StreamingAggregator, run_streaming
from .in_memory import InMemoryAggregator, run_in_memory

__all__ = [
    "Accumulator",
    "AccumulatorStore",
    "KeyDeriver",
    "derive_key",
    "grouping_label",
    "PivotPlan",
    "PivotResult",
    "ScanState",
    "NO_ROW_LIMIT",
    "StreamingAggregator",
    "run_streaming",
    "InMemoryAggregator",
    "run_in_memory",
]
