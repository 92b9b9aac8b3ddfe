"""
aggregation/base.py

Shared pieces of the streaming and in-memory aggregators.

PivotPlan:   validated call configuration + the per-row step
             (required fields → filter → key → fold)
ScanState:   lifecycle of one aggregation call
PivotResult: what a run hands back to its caller
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from ..filters import FilterSet, FilterSpec
from ..models import Row, ValueKind
from .keys import KeyDeriver, KeyFunc
from .store import AccumulatorStore

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    NOT_STARTED   = "not_started"
    SCANNING      = "scanning"
    EARLY_STOPPED = "early_stopped"
    EXHAUSTED     = "exhausted"
    FINALIZED     = "finalized"
    EMITTED       = "emitted"


@dataclass
class PivotResult:
    """Outcome of one aggregation call."""

    store: AccumulatorStore
    rows_scanned: int = 0
    """Every row examined, whether or not it passed the filters."""

    rows_included: int = 0
    """Rows folded into the store."""

    state: ScanState = ScanState.NOT_STARTED
    stopped_early: bool = False
    """True if the max_rows bound ended the scan before the source ran out."""

    elapsed_seconds: float = 0.0
    output_path: str | None = None
    """Set only when a table was written."""

    @property
    def rows_filtered(self) -> int:
        return self.rows_scanned - self.rows_included

    def __repr__(self) -> str:
        return (
            f"PivotResult(scanned={self.rows_scanned} "
            f"included={self.rows_included} "
            f"groups={len(self.store)} "
            f"state={self.state.value})"
        )


class PivotPlan:
    """
    Immutable description of what one aggregation call groups, measures
    and filters, plus the step that applies it to a single row.

    Args:
        grouping_fields: Ordered text fields forming the composite key.
        measured_fields: Ordered numeric fields to sum / count / average.
        filters:         FilterSet, a single FilterSpec, or None.
        key_func:        Optional replacement for the default pipe-joined key.
        label:           Optional column-0 header; defaults to the joined
                         grouping field names.
        separator:       Key separator; defaults to settings.KEY_SEPARATOR.
    """

    def __init__(
        self,
        grouping_fields: Sequence[str],
        measured_fields: Sequence[str],
        filters: FilterSet | FilterSpec | None = None,
        key_func: KeyFunc | None = None,
        label: str | None = None,
        separator: str | None = None,
    ) -> None:
        if isinstance(grouping_fields, str) or isinstance(measured_fields, str):
            raise TypeError("grouping_fields and measured_fields must be sequences of names, not str")
        self.grouping_fields: tuple[str, ...] = tuple(grouping_fields)
        self.measured_fields: tuple[str, ...] = tuple(measured_fields)
        if not self.measured_fields:
            raise ValueError("at least one measured field is required")
        self.filters = FilterSet.coerce(filters)
        self.derive_key = KeyDeriver(self.grouping_fields, separator=separator, key_func=key_func)
        self.label = label if label is not None else self.derive_key.label
        self.required_fields: frozenset[str] = frozenset(
            self.grouping_fields + self.measured_fields
        ) | frozenset(self.filters.fields)
        # every (field, kind) a row must satisfy, checked before any filter runs
        self.field_kinds: tuple[tuple[str, ValueKind], ...] = tuple(dict.fromkeys(
            [(name, ValueKind.TEXT) for name in self.grouping_fields]
            + [(name, ValueKind.NUMERIC) for name in self.measured_fields]
            + [(name, ValueKind.TEXT) for name in sorted(self.filters.text.fields)]
            + [(name, ValueKind.NUMERIC) for name in sorted(self.filters.numeric.fields)]
        ))

    def new_store(self) -> AccumulatorStore:
        return AccumulatorStore(self.measured_fields)

    def process(self, raw: Mapping[str, object], store: AccumulatorStore, index: int | None = None) -> bool:
        """
        Apply the plan to one row. Returns True if the row was folded.

        Presence and kind of every configured field are checked first, so a
        malformed row raises MissingFieldError / TypeMismatchError even when
        the filters would have rejected it. ``index`` only labels errors.
        """
        if not isinstance(raw, Mapping):
            raise TypeError(
                f"row {index if index is not None else '?'} is a {type(raw).__name__}, "
                "not a mapping of field name to value"
            )
        row = Row.of(raw)
        row.require(self.required_fields)
        row.require_kinds(self.field_kinds)
        if not self.filters.passes(row):
            return False
        store.fold(self.derive_key(row), row)
        return True

    def __repr__(self) -> str:
        return (
            f"PivotPlan(group={list(self.grouping_fields)} "
            f"measure={list(self.measured_fields)} "
            f"filtered={not self.filters.is_empty})"
        )
