"""
pivotscan

Grouped sum / count / mean pivot tables over streamed or in-memory rows.
"""

from .aggregation import (
    AccumulatorStore,
    PivotResult,
    run_in_memory,
    run_streaming,
)
from .errors import (
    EmptyAccumulatorError,
    MissingFieldError,
    PivotError,
    RowParseError,
    TableWriteError,
    TypeMismatchError,
)
from .filters import FilterSet, FilterSpec, passes
from .models import Row, ValueKind

__all__ = [
    "AccumulatorStore",
    "PivotResult",
    "run_in_memory",
    "run_streaming",
    "PivotError",
    "MissingFieldError",
    "TypeMismatchError",
    "RowParseError",
    "EmptyAccumulatorError",
    "TableWriteError",
    "FilterSet",
    "FilterSpec",
    "passes",
    "Row",
    "ValueKind",
]
